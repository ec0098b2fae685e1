"""
Local store for employees, meals, payments and the settings singleton.

Backed by SQLite through SQLAlchemy's asyncio extension. Every public method
is a coroutine running in its own session; the cascade delete, the payment
recording and the day sheet save are the only multi-record writes, each
inside a single transaction.
"""
import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cantineo.config import get_settings
from cantineo.database import Base, create_engine, create_session_factory
from cantineo.exceptions import (
    DuplicateMeal,
    InvalidArgument,
    StorageError,
    StorageUnavailable,
    TransactionFailed,
)
from cantineo.models import (
    SETTINGS_KEY,
    AppSettingsRow,
    EmployeeRow,
    MealRecordRow,
    PaymentRecordRow,
)
from cantineo.schemas import AppSettings, Employee, MealRecord, PaymentRecord
from cantineo.utils.logger import get_logger
from cantineo.utils.validators import validate_iso_day, validate_meal_price, validate_payment_amount

logger = get_logger(__name__)


def _check_payment(payment: PaymentRecord) -> None:
    validate_iso_day(payment.date)
    validate_payment_amount(payment.amount)


class MealStore:
    """Explicit handle over the local database with an initialize/close lifecycle"""

    def __init__(
        self,
        database_url: Optional[str] = None,
        default_meal_price: Optional[Decimal] = None,
        echo: Optional[bool] = None,
    ):
        settings = get_settings()
        self.database_url = database_url or settings.DATABASE_URL
        self.default_meal_price = (
            default_meal_price if default_meal_price is not None else settings.DEFAULT_MEAL_PRICE
        )
        self._engine = create_engine(
            self.database_url, echo=settings.SQL_ECHO if echo is None else echo
        )
        self._session_factory = create_session_factory(self._engine)
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> "MealStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # --- Lifecycle ---

    async def initialize(self) -> None:
        """Create tables and indexes, then seed the settings row if missing"""
        async with self._init_lock:
            if self._initialized:
                return
            try:
                async with self._engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)

                async with self._session_factory() as session:
                    existing = await session.get(AppSettingsRow, SETTINGS_KEY)
                    if existing is None:
                        session.add(
                            AppSettingsRow(id=SETTINGS_KEY, meal_price=self.default_meal_price)
                        )
                        await session.commit()
                        logger.info(f"Seeded default meal price {self.default_meal_price}")
            except SQLAlchemyError as e:
                logger.error(f"Could not open database {self.database_url}: {e}")
                raise StorageUnavailable(f"Cannot open database at {self.database_url}") from e

            self._initialized = True
            logger.info("Database tables ready")

    async def close(self) -> None:
        """Release the engine's connections"""
        await self._engine.dispose()
        self._initialized = False

    async def _ensure_ready(self) -> None:
        if not self._initialized:
            await self.initialize()

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        await self._ensure_ready()
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{operation} failed: {e}")
                raise StorageError(f"{operation} failed") from e

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """All-or-nothing unit of work; any storage failure rolls everything back"""
        await self._ensure_ready()
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error(f"{operation} rolled back: {e}")
                raise TransactionFailed(f"{operation} failed and was rolled back") from e

    @staticmethod
    async def _require_employee(session: AsyncSession, employee_id: str) -> None:
        if await session.get(EmployeeRow, employee_id) is None:
            raise InvalidArgument(f"Unknown employee {employee_id}")

    # --- Employees ---

    async def list_employees(self) -> List[Employee]:
        async with self._session("list_employees") as session:
            result = await session.execute(select(EmployeeRow))
            return [Employee.model_validate(row) for row in result.scalars().all()]

    async def get_employee(self, employee_id: str) -> Optional[Employee]:
        async with self._session("get_employee") as session:
            row = await session.get(EmployeeRow, employee_id)
            return Employee.model_validate(row) if row is not None else None

    async def put_employee(self, employee: Employee) -> None:
        """Insert or replace by id"""
        async with self._session("put_employee") as session:
            await session.merge(EmployeeRow(id=employee.id, name=employee.name))
            await session.commit()

    async def delete_employee(self, employee_id: str) -> None:
        """Delete an employee together with every meal and payment it owns"""
        async with self._transaction("delete_employee") as session:
            meals = await session.execute(
                delete(MealRecordRow).where(MealRecordRow.employee_id == employee_id)
            )
            payments = await session.execute(
                delete(PaymentRecordRow).where(PaymentRecordRow.employee_id == employee_id)
            )
            await session.execute(delete(EmployeeRow).where(EmployeeRow.id == employee_id))
        logger.info(
            f"Deleted employee {employee_id} with {meals.rowcount} meals "
            f"and {payments.rowcount} payments"
        )

    # --- Meals ---

    async def list_meals(self) -> List[MealRecord]:
        async with self._session("list_meals") as session:
            result = await session.execute(select(MealRecordRow))
            return [MealRecord.model_validate(row) for row in result.scalars().all()]

    async def list_meals_for_employee(self, employee_id: str) -> List[MealRecord]:
        async with self._session("list_meals_for_employee") as session:
            result = await session.execute(
                select(MealRecordRow).where(MealRecordRow.employee_id == employee_id)
            )
            return [MealRecord.model_validate(row) for row in result.scalars().all()]

    async def list_meals_for_date(self, date: str) -> List[MealRecord]:
        validate_iso_day(date)
        async with self._session("list_meals_for_date") as session:
            result = await session.execute(
                select(MealRecordRow).where(MealRecordRow.date == date)
            )
            return [MealRecord.model_validate(row) for row in result.scalars().all()]

    async def put_meal(self, meal: MealRecord) -> None:
        """Insert or replace by id; a second meal for the same employee and day is rejected"""
        validate_iso_day(meal.date)
        async with self._session("put_meal") as session:
            await self._require_employee(session, meal.employee_id)
            clash = await session.execute(
                select(MealRecordRow.id).where(
                    MealRecordRow.employee_id == meal.employee_id,
                    MealRecordRow.date == meal.date,
                    MealRecordRow.id != meal.id,
                )
            )
            if clash.first() is not None:
                raise DuplicateMeal(meal.employee_id, meal.date)

            await session.merge(MealRecordRow(**meal.model_dump()))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateMeal(meal.employee_id, meal.date) from e

    async def delete_meal(self, meal_id: str) -> None:
        async with self._session("delete_meal") as session:
            await session.execute(delete(MealRecordRow).where(MealRecordRow.id == meal_id))
            await session.commit()

    async def save_day_sheet(
        self, date: str, new_meals: Iterable[MealRecord], removed_meal_ids: Iterable[str]
    ) -> None:
        """Add and remove meals of one day in a single transaction"""
        validate_iso_day(date)
        new_meals = list(new_meals)
        for meal in new_meals:
            if meal.date != date:
                raise InvalidArgument(f"Meal {meal.id} is dated {meal.date}, not {date}")

        async with self._transaction("save_day_sheet") as session:
            removed = list(removed_meal_ids)
            if removed:
                await session.execute(delete(MealRecordRow).where(MealRecordRow.id.in_(removed)))
            for meal in new_meals:
                await self._require_employee(session, meal.employee_id)
                clash = await session.execute(
                    select(MealRecordRow.id).where(
                        MealRecordRow.employee_id == meal.employee_id,
                        MealRecordRow.date == date,
                        MealRecordRow.id != meal.id,
                    )
                )
                if clash.first() is not None:
                    raise DuplicateMeal(meal.employee_id, date)
                await session.merge(MealRecordRow(**meal.model_dump()))

    # --- Payments ---

    async def list_payments(self) -> List[PaymentRecord]:
        async with self._session("list_payments") as session:
            result = await session.execute(select(PaymentRecordRow))
            return [PaymentRecord.model_validate(row) for row in result.scalars().all()]

    async def list_payments_for_employee(self, employee_id: str) -> List[PaymentRecord]:
        async with self._session("list_payments_for_employee") as session:
            result = await session.execute(
                select(PaymentRecordRow).where(PaymentRecordRow.employee_id == employee_id)
            )
            return [PaymentRecord.model_validate(row) for row in result.scalars().all()]

    async def list_payments_for_date(self, date: str) -> List[PaymentRecord]:
        validate_iso_day(date)
        async with self._session("list_payments_for_date") as session:
            result = await session.execute(
                select(PaymentRecordRow).where(PaymentRecordRow.date == date)
            )
            return [PaymentRecord.model_validate(row) for row in result.scalars().all()]

    async def put_payment(self, payment: PaymentRecord) -> None:
        """Insert or replace by id"""
        _check_payment(payment)
        async with self._session("put_payment") as session:
            await self._require_employee(session, payment.employee_id)
            await session.merge(PaymentRecordRow(**payment.model_dump()))
            await session.commit()

    async def record_payment(
        self, payment: PaymentRecord, paid_meals: Iterable[MealRecord] = ()
    ) -> None:
        """Persist a payment and the meals it settles in one transaction"""
        _check_payment(payment)
        async with self._transaction("record_payment") as session:
            await self._require_employee(session, payment.employee_id)
            await session.merge(PaymentRecordRow(**payment.model_dump()))
            for meal in paid_meals:
                await session.merge(MealRecordRow(**meal.model_dump()))

    # --- Settings ---

    async def get_settings(self) -> Optional[AppSettings]:
        async with self._session("get_settings") as session:
            row = await session.get(AppSettingsRow, SETTINGS_KEY)
            return AppSettings.model_validate(row) if row is not None else None

    async def put_settings(self, settings: AppSettings) -> None:
        """Replace the settings singleton"""
        validate_meal_price(settings.meal_price)
        async with self._session("put_settings") as session:
            await session.merge(AppSettingsRow(id=SETTINGS_KEY, meal_price=settings.meal_price))
            await session.commit()
