"""
Balance accounting - what each employee owes given meals, payments and the meal price
"""
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal
from typing import Dict, Iterable, List, Union

from cantineo.schemas import Employee, EmployeeLedger, MealRecord, PaymentRecord
from cantineo.store import MealStore
from cantineo.utils.helpers import new_id
from cantineo.utils.logger import get_logger
from cantineo.utils.validators import normalize_date, to_decimal, validate_payment_amount

logger = get_logger(__name__)

ZERO = Decimal("0")


def balance(
    employee_id: str,
    meals: Iterable[MealRecord],
    payments: Iterable[PaymentRecord],
    meal_price: Decimal,
) -> Decimal:
    """
    Amount owed by one employee: meals eaten times the price, minus payments.

    Positive means the employee owes money; zero or negative means paid in
    full or overpaid.
    """
    price = to_decimal(meal_price)
    meal_count = sum(1 for meal in meals if meal.employee_id == employee_id)
    paid = sum(
        (payment.amount for payment in payments if payment.employee_id == employee_id),
        ZERO,
    )
    return meal_count * price - paid


def aggregate_balance(
    employees: Iterable[Employee],
    meals: Iterable[MealRecord],
    payments: Iterable[PaymentRecord],
    meal_price: Decimal,
) -> Decimal:
    """Sum of every employee's balance"""
    meals = list(meals)
    payments = list(payments)
    return sum(
        (balance(employee.id, meals, payments, meal_price) for employee in employees),
        ZERO,
    )


def plan_allocation(
    meals: Iterable[MealRecord], amount: Decimal, meal_price: Decimal
) -> List[MealRecord]:
    """
    Unpaid meals covered by a payment, each returned with paid=True.

    Oldest day first; one full meal price is consumed per meal and any
    remainder smaller than the price is left unallocated.
    """
    price = to_decimal(meal_price)
    remaining = to_decimal(amount)
    unpaid = sorted((meal for meal in meals if not meal.paid), key=lambda m: (m.date, m.id))

    covered: List[MealRecord] = []
    for meal in unpaid:
        if remaining < price:
            break
        covered.append(meal.model_copy(update={"paid": True}))
        remaining -= price
    return covered


@dataclass
class AccountingService:
    """Loads ledgers from the store and records payments against them"""

    store: MealStore

    async def record_payment_and_allocate(
        self,
        employee_id: str,
        amount: Union[Decimal, int, float, str],
        date: Union[str, date_type],
        meal_price: Decimal,
    ) -> List[MealRecord]:
        """Record a payment and mark the unpaid meals it covers as paid"""
        value = validate_payment_amount(amount)
        day = normalize_date(date)

        payment = PaymentRecord(id=new_id(), employee_id=employee_id, date=day, amount=value)
        meals = await self.store.list_meals_for_employee(employee_id)
        covered = plan_allocation(meals, value, meal_price)

        await self.store.record_payment(payment, covered)
        logger.info(
            f"Recorded payment {payment.id} of {value} for employee {employee_id}, "
            f"{len(covered)} meals marked paid"
        )
        return covered

    async def load_ledger(self, employee: Employee) -> EmployeeLedger:
        return EmployeeLedger(
            employee=employee,
            meals=await self.store.list_meals_for_employee(employee.id),
            payments=await self.store.list_payments_for_employee(employee.id),
        )

    async def load_ledgers(self) -> List[EmployeeLedger]:
        """Every employee with its meals and payments, sorted by name"""
        employees = await self.store.list_employees()
        employees.sort(key=lambda e: e.name.lower())
        return [await self.load_ledger(employee) for employee in employees]

    async def employee_balances(self, meal_price: Decimal) -> Dict[str, Decimal]:
        """Balance per employee id"""
        return {
            ledger.employee.id: balance(
                ledger.employee.id, ledger.meals, ledger.payments, meal_price
            )
            for ledger in await self.load_ledgers()
        }
