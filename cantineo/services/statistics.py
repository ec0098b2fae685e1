"""
Figures behind the dashboard and statistics views
"""
from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Union

from cantineo.schemas import Employee, MealRecord, PaymentRecord
from cantineo.services.accounting import ZERO, aggregate_balance
from cantineo.services.settings_provider import SettingsProvider
from cantineo.store import MealStore
from cantineo.utils.helpers import last_n_days, month_days
from cantineo.utils.validators import normalize_date


@dataclass(frozen=True)
class DailyMealPoint:
    date: str
    count: int
    value: Decimal


@dataclass(frozen=True)
class EmployeeMealShare:
    employee_id: str
    name: str
    count: int
    value: Decimal


@dataclass(frozen=True)
class TotalStats:
    total_meals: int
    total_value: Decimal
    total_payments: Decimal
    outstanding_balance: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    total_employees: int
    meals_today: int
    outstanding_balance: Decimal


def daily_meal_series(
    meals: Iterable[MealRecord], days: Iterable[str], meal_price: Decimal
) -> List[DailyMealPoint]:
    """Meal count and value for each requested day, zero-filled"""
    per_day = Counter(meal.date for meal in meals)
    return [
        DailyMealPoint(date=day, count=per_day[day], value=per_day[day] * meal_price)
        for day in days
    ]


def employee_meal_distribution(
    employees: Iterable[Employee], meals: Iterable[MealRecord], meal_price: Decimal
) -> List[EmployeeMealShare]:
    """Meals per employee, most meals first"""
    per_employee = Counter(meal.employee_id for meal in meals)
    shares = [
        EmployeeMealShare(
            employee_id=employee.id,
            name=employee.name,
            count=per_employee[employee.id],
            value=per_employee[employee.id] * meal_price,
        )
        for employee in employees
    ]
    return sorted(shares, key=lambda share: share.count, reverse=True)


def total_stats(
    meals: Iterable[MealRecord], payments: Iterable[PaymentRecord], meal_price: Decimal
) -> TotalStats:
    total_meals = sum(1 for _ in meals)
    total_value = total_meals * meal_price
    total_payments = sum((payment.amount for payment in payments), ZERO)
    return TotalStats(
        total_meals=total_meals,
        total_value=total_value,
        total_payments=total_payments,
        outstanding_balance=total_value - total_payments,
    )


@dataclass
class StatisticsService:
    store: MealStore
    settings_provider: SettingsProvider

    async def weekly_series(
        self, today: Union[str, date], days: int = 7
    ) -> List[DailyMealPoint]:
        day = date.fromisoformat(normalize_date(today))
        meals = await self.store.list_meals()
        price = await self.settings_provider.get_meal_price()
        return daily_meal_series(meals, last_n_days(day, days), price)

    async def monthly_series(self, year: int, month: int) -> List[DailyMealPoint]:
        meals = await self.store.list_meals()
        price = await self.settings_provider.get_meal_price()
        return daily_meal_series(meals, month_days(year, month), price)

    async def distribution(self) -> List[EmployeeMealShare]:
        employees = await self.store.list_employees()
        meals = await self.store.list_meals()
        price = await self.settings_provider.get_meal_price()
        return employee_meal_distribution(employees, meals, price)

    async def totals(self) -> TotalStats:
        meals = await self.store.list_meals()
        payments = await self.store.list_payments()
        price = await self.settings_provider.get_meal_price()
        return total_stats(meals, payments, price)

    async def dashboard(self, today: Union[str, date]) -> DashboardSummary:
        day = normalize_date(today)
        employees = await self.store.list_employees()
        price = await self.settings_provider.get_meal_price()
        outstanding = aggregate_balance(
            employees,
            await self.store.list_meals(),
            await self.store.list_payments(),
            price,
        )
        meals_today = await self.store.list_meals_for_date(day)
        return DashboardSummary(
            total_employees=len(employees),
            meals_today=len(meals_today),
            outstanding_balance=outstanding,
        )
