"""Initialize database tables and the default settings row"""
import asyncio
from cantineo.config import get_settings
from cantineo.store import MealStore


async def init():
    async with MealStore() as store:
        settings = await store.get_settings()
    print(f"Database ready at {get_settings().DATABASE_URL} (meal price {settings.meal_price}).")


if __name__ == "__main__":
    asyncio.run(init())
