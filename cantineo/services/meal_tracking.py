"""
Day sheet - who ate on a given day
"""
from dataclasses import dataclass
from datetime import date as date_type
from typing import Dict, Iterable, List, Optional, Union

from cantineo.exceptions import InvalidArgument
from cantineo.schemas import MealRecord
from cantineo.store import MealStore
from cantineo.utils.helpers import new_id
from cantineo.utils.logger import get_logger
from cantineo.utils.validators import normalize_date

logger = get_logger(__name__)


@dataclass
class MealTrackingService:
    store: MealStore

    async def meals_for_date(
        self, date: Union[str, date_type]
    ) -> Dict[str, Optional[MealRecord]]:
        """Meal of every employee on that day, None for those who did not eat"""
        day = normalize_date(date)
        employees = await self.store.list_employees()
        meals = {meal.employee_id: meal for meal in await self.store.list_meals_for_date(day)}
        return {employee.id: meals.get(employee.id) for employee in employees}

    async def toggle_meal(
        self, employee_id: str, date: Union[str, date_type]
    ) -> Optional[MealRecord]:
        """Add the meal if absent, remove it if present. Returns the new meal or None"""
        day = normalize_date(date)
        existing = [
            meal for meal in await self.store.list_meals_for_date(day)
            if meal.employee_id == employee_id
        ]
        if existing:
            for meal in existing:
                await self.store.delete_meal(meal.id)
            return None

        meal = MealRecord(id=new_id(), employee_id=employee_id, date=day, paid=False)
        await self.store.put_meal(meal)
        return meal

    async def save_meals_for_date(
        self, date: Union[str, date_type], selected_employee_ids: Iterable[str]
    ) -> List[MealRecord]:
        """
        Make the stored meals for a day match the selection.

        Selected employees without a meal get one; unselected employees lose
        theirs. Existing meals of selected employees are kept untouched so
        their paid flag survives. Returns the meals stored for that day.
        """
        day = normalize_date(date)
        selected = set(selected_employee_ids)
        employees = {employee.id for employee in await self.store.list_employees()}

        unknown = selected - employees
        if unknown:
            raise InvalidArgument(f"Unknown employees: {', '.join(sorted(unknown))}")

        existing = {meal.employee_id: meal for meal in await self.store.list_meals_for_date(day)}
        created: List[MealRecord] = []
        removed: List[str] = []

        for employee_id in sorted(employees):
            meal = existing.get(employee_id)
            if employee_id in selected and meal is None:
                created.append(
                    MealRecord(id=new_id(), employee_id=employee_id, date=day, paid=False)
                )
            elif employee_id not in selected and meal is not None:
                removed.append(meal.id)

        await self.store.save_day_sheet(day, created, removed)
        logger.info(f"Saved meals for {day}: {len(created)} added, {len(removed)} removed")
        return await self.store.list_meals_for_date(day)
