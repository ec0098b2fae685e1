"""
Meal price accessor over the store's settings singleton
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union

from cantineo.config import get_settings
from cantineo.schemas import AppSettings
from cantineo.store import MealStore
from cantineo.utils.logger import get_logger
from cantineo.utils.validators import validate_meal_price

logger = get_logger(__name__)


def _default_meal_price() -> Decimal:
    return get_settings().DEFAULT_MEAL_PRICE


@dataclass
class SettingsProvider:
    store: MealStore
    default_meal_price: Decimal = field(default_factory=_default_meal_price)

    async def get_settings(self) -> AppSettings:
        """Stored settings, or the defaults when none have been saved"""
        settings = await self.store.get_settings()
        if settings is None:
            return AppSettings(meal_price=self.default_meal_price)
        return settings

    async def get_meal_price(self) -> Decimal:
        return (await self.get_settings()).meal_price

    async def set_meal_price(self, value: Union[Decimal, int, float, str]) -> AppSettings:
        """Replace the meal price; non-positive values are rejected"""
        price = validate_meal_price(value)
        settings = AppSettings(meal_price=price)
        await self.store.put_settings(settings)
        logger.info(f"Meal price set to {price}")
        return settings
