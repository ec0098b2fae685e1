"""
Plain data shapes handed to callers - never live ORM rows
"""
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cantineo.utils.validators import validate_iso_day, validate_meal_price, validate_payment_amount


class Employee(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class MealRecord(BaseModel):
    id: str
    employee_id: str
    date: str = Field(..., description="Calendar day, YYYY-MM-DD")
    paid: bool = False

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return validate_iso_day(value)


class PaymentRecord(BaseModel):
    id: str
    employee_id: str
    date: str = Field(..., description="Calendar day, YYYY-MM-DD")
    amount: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return validate_iso_day(value)

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: Decimal) -> Decimal:
        return validate_payment_amount(value)


class AppSettings(BaseModel):
    meal_price: Decimal

    model_config = ConfigDict(from_attributes=True)

    @field_validator("meal_price")
    @classmethod
    def check_meal_price(cls, value: Decimal) -> Decimal:
        return validate_meal_price(value)


class EmployeeLedger(BaseModel):
    """Employee with its meals and payments nested, for display only"""
    employee: Employee
    meals: List[MealRecord] = []
    payments: List[PaymentRecord] = []
