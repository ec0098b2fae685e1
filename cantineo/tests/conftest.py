"""
Test fixtures - a fresh in-memory SQLite store per test plus a few employees
"""
from decimal import Decimal

import pytest_asyncio

from cantineo.schemas import Employee
from cantineo.services.accounting import AccountingService
from cantineo.services.meal_tracking import MealTrackingService
from cantineo.services.settings_provider import SettingsProvider
from cantineo.services.statistics import StatisticsService
from cantineo.store import MealStore


@pytest_asyncio.fixture()
async def store():
    """Create a fresh in-memory SQLite store for each test"""
    meal_store = MealStore(
        "sqlite+aiosqlite:///:memory:", default_meal_price=Decimal("5.00"), echo=False
    )
    await meal_store.initialize()

    yield meal_store

    await meal_store.close()


@pytest_asyncio.fixture()
async def seed_data(store):
    """Insert baseline test data: 3 employees"""
    alice = Employee(id="emp-alice", name="Alice")
    bob = Employee(id="emp-bob", name="Bob")
    carol = Employee(id="emp-carol", name="Carol")

    for employee in (alice, bob, carol):
        await store.put_employee(employee)

    return {"alice": alice, "bob": bob, "carol": carol}


@pytest_asyncio.fixture()
async def settings_provider(store):
    return SettingsProvider(store, default_meal_price=Decimal("5.00"))


@pytest_asyncio.fixture()
async def accounting(store):
    return AccountingService(store)


@pytest_asyncio.fixture()
async def tracking(store):
    return MealTrackingService(store)


@pytest_asyncio.fixture()
async def statistics(store, settings_provider):
    return StatisticsService(store, settings_provider)
