"""
Application settings model - a single row under a fixed key
"""
from sqlalchemy import Column, String
from cantineo.database import Base, Money

SETTINGS_KEY = "app-settings"


class AppSettingsRow(Base):
    __tablename__ = "settings"

    id = Column(String, primary_key=True, default=SETTINGS_KEY)
    meal_price = Column(Money, nullable=False)
