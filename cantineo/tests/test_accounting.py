"""
Accounting tests - balances and payment allocation.
"""
from datetime import date
from decimal import Decimal

import pytest

from cantineo.exceptions import InvalidArgument
from cantineo.schemas import Employee, MealRecord, PaymentRecord
from cantineo.services.accounting import aggregate_balance, balance, plan_allocation

PRICE = Decimal("5.00")


def meal(meal_id, employee_id, day, paid=False):
    return MealRecord(id=meal_id, employee_id=employee_id, date=day, paid=paid)


def payment(payment_id, employee_id, amount, day="2024-03-10"):
    return PaymentRecord(id=payment_id, employee_id=employee_id, date=day, amount=Decimal(amount))


# ===================== BALANCE =====================


class TestBalance:

    def test_no_records_is_zero(self):
        assert balance("e1", [], [], PRICE) == 0

    def test_employee_without_records_is_zero(self):
        meals = [meal("m1", "e2", "2024-03-04")]
        payments = [payment("p1", "e2", "3")]
        assert balance("e1", meals, payments, PRICE) == 0

    def test_meals_minus_payments(self):
        meals = [meal("m1", "e1", "2024-03-04"), meal("m2", "e1", "2024-03-05"), meal("m3", "e1", "2024-03-06")]
        payments = [payment("p1", "e1", "4"), payment("p2", "e1", "2.5")]
        assert balance("e1", meals, payments, PRICE) == Decimal("8.50")

    def test_paid_flag_does_not_change_balance(self):
        meals = [meal("m1", "e1", "2024-03-04", paid=True), meal("m2", "e1", "2024-03-05")]
        assert balance("e1", meals, [], PRICE) == Decimal("10.00")

    def test_adding_meal_increases_by_price(self):
        meals = [meal("m1", "e1", "2024-03-04")]
        before = balance("e1", meals, [], PRICE)
        after = balance("e1", meals + [meal("m2", "e1", "2024-03-05")], [], PRICE)
        assert after - before == PRICE

    def test_adding_payment_decreases_by_amount(self):
        meals = [meal("m1", "e1", "2024-03-04")]
        payments = [payment("p1", "e1", "1.10")]
        before = balance("e1", meals, payments, PRICE)
        after = balance("e1", meals, payments + [payment("p2", "e1", "3.35")], PRICE)
        assert before - after == Decimal("3.35")

    def test_overpaid_is_negative(self):
        assert balance("e1", [meal("m1", "e1", "2024-03-04")], [payment("p1", "e1", "20")], PRICE) == Decimal("-15.00")

    def test_no_float_drift(self):
        payments = [payment(f"p{i}", "e1", "0.1") for i in range(10)]
        assert balance("e1", [], payments, Decimal("0.1")) == Decimal("-1.0")

    def test_accepts_float_price(self):
        meals = [meal("m1", "e1", "2024-03-04"), meal("m2", "e1", "2024-03-05")]
        assert balance("e1", meals, [], 5.1) == Decimal("10.2")


class TestAggregateBalance:

    def test_sums_employee_balances(self):
        employees = [Employee(id="e1", name="A"), Employee(id="e2", name="B")]
        meals = [meal("m1", "e1", "2024-03-04"), meal("m2", "e2", "2024-03-04"), meal("m3", "e2", "2024-03-05")]
        payments = [payment("p1", "e1", "10"), payment("p2", "e2", "3")]
        assert aggregate_balance(employees, meals, payments, PRICE) == Decimal("2.00")

    def test_ignores_records_of_unlisted_employees(self):
        employees = [Employee(id="e1", name="A")]
        meals = [meal("m1", "e1", "2024-03-04"), meal("m2", "e9", "2024-03-04")]
        assert aggregate_balance(employees, meals, [], PRICE) == PRICE

    def test_no_employees(self):
        assert aggregate_balance([], [], [], PRICE) == 0


# ===================== ALLOCATION PLAN =====================


class TestPlanAllocation:

    def test_covers_whole_meals_only(self):
        meals = [meal("m1", "e1", "2024-03-04"), meal("m2", "e1", "2024-03-05"), meal("m3", "e1", "2024-03-06")]
        covered = plan_allocation(meals, Decimal("12.0"), PRICE)
        assert [m.id for m in covered] == ["m1", "m2"]
        assert all(m.paid for m in covered)

    def test_oldest_day_first(self):
        meals = [meal("m3", "e1", "2024-03-06"), meal("m1", "e1", "2024-03-04"), meal("m2", "e1", "2024-03-05")]
        covered = plan_allocation(meals, Decimal("10"), PRICE)
        assert [m.date for m in covered] == ["2024-03-04", "2024-03-05"]

    def test_skips_already_paid(self):
        meals = [meal("m1", "e1", "2024-03-04", paid=True), meal("m2", "e1", "2024-03-05")]
        covered = plan_allocation(meals, Decimal("10"), PRICE)
        assert [m.id for m in covered] == ["m2"]

    def test_amount_below_price_covers_nothing(self):
        assert plan_allocation([meal("m1", "e1", "2024-03-04")], Decimal("4.0"), PRICE) == []

    def test_input_meals_untouched(self):
        meals = [meal("m1", "e1", "2024-03-04")]
        plan_allocation(meals, Decimal("5"), PRICE)
        assert meals[0].paid is False


# ===================== RECORD PAYMENT =====================


async def _add_meals(store, employee_id, days):
    for index, day in enumerate(days):
        await store.put_meal(meal(f"{employee_id}-m{index}", employee_id, day))


async def test_payment_of_12_marks_two_of_three_meals(store, seed_data, accounting):
    await _add_meals(store, "emp-alice", ["2024-03-06", "2024-03-04", "2024-03-05"])

    updated = await accounting.record_payment_and_allocate("emp-alice", Decimal("12.0"), "2024-03-10", PRICE)

    assert len(updated) == 2
    meals = await store.list_meals_for_employee("emp-alice")
    assert sorted(m.date for m in meals if m.paid) == ["2024-03-04", "2024-03-05"]
    assert [m.date for m in meals if not m.paid] == ["2024-03-06"]


async def test_small_payment_marks_nothing_but_is_recorded(store, seed_data, accounting):
    await _add_meals(store, "emp-alice", ["2024-03-04", "2024-03-05", "2024-03-06"])

    updated = await accounting.record_payment_and_allocate("emp-alice", Decimal("4.0"), "2024-03-10", PRICE)

    assert updated == []
    meals = await store.list_meals_for_employee("emp-alice")
    payments = await store.list_payments_for_employee("emp-alice")
    assert not any(m.paid for m in meals)
    assert [p.amount for p in payments] == [Decimal("4.0")]
    assert balance("emp-alice", meals, payments, PRICE) == Decimal("11.0")


async def test_paid_meals_are_never_unmarked(store, seed_data, accounting):
    await _add_meals(store, "emp-alice", ["2024-03-04", "2024-03-05"])

    await accounting.record_payment_and_allocate("emp-alice", "5", "2024-03-10", PRICE)
    await accounting.record_payment_and_allocate("emp-alice", "1", "2024-03-11", PRICE)

    meals = {m.date: m.paid for m in await store.list_meals_for_employee("emp-alice")}
    assert meals == {"2024-03-04": True, "2024-03-05": False}


async def test_payment_date_is_normalized(store, seed_data, accounting):
    await accounting.record_payment_and_allocate("emp-bob", 5, date(2024, 3, 10), PRICE)
    payments = await store.list_payments_for_employee("emp-bob")
    assert payments[0].date == "2024-03-10"


async def test_other_employees_meals_untouched(store, seed_data, accounting):
    await _add_meals(store, "emp-bob", ["2024-03-04"])

    await accounting.record_payment_and_allocate("emp-alice", "50", "2024-03-10", PRICE)

    assert not (await store.list_meals_for_employee("emp-bob"))[0].paid


@pytest.mark.parametrize("amount", [0, -5, "abc"])
async def test_invalid_amount_rejected(store, seed_data, accounting, amount):
    with pytest.raises(InvalidArgument):
        await accounting.record_payment_and_allocate("emp-alice", amount, "2024-03-10", PRICE)
    assert await store.list_payments() == []


async def test_malformed_date_rejected(store, seed_data, accounting):
    with pytest.raises(InvalidArgument):
        await accounting.record_payment_and_allocate("emp-alice", "5", "10/03/2024", PRICE)


async def test_unknown_employee_rejected(store, accounting):
    with pytest.raises(InvalidArgument):
        await accounting.record_payment_and_allocate("ghost", "5", "2024-03-10", PRICE)


# ===================== LEDGERS =====================


async def test_employee_balances(store, seed_data, accounting):
    await _add_meals(store, "emp-alice", ["2024-03-04", "2024-03-05"])
    await _add_meals(store, "emp-bob", ["2024-03-04"])
    await accounting.record_payment_and_allocate("emp-bob", "8", "2024-03-10", PRICE)

    balances = await accounting.employee_balances(PRICE)

    assert balances == {
        "emp-alice": Decimal("10.00"),
        "emp-bob": Decimal("-3.00"),
        "emp-carol": Decimal("0"),
    }


async def test_load_ledgers_sorted_by_name(store, seed_data, accounting):
    await store.put_employee(Employee(id="emp-aaron", name="aaron"))
    await _add_meals(store, "emp-alice", ["2024-03-04"])

    ledgers = await accounting.load_ledgers()

    assert [ledger.employee.name for ledger in ledgers] == ["aaron", "Alice", "Bob", "Carol"]
    alice = ledgers[1]
    assert [m.id for m in alice.meals] == ["emp-alice-m0"]
    assert alice.payments == []
