from cantineo.models.employee import EmployeeRow
from cantineo.models.meal_record import MealRecordRow
from cantineo.models.payment_record import PaymentRecordRow
from cantineo.models.app_settings import AppSettingsRow, SETTINGS_KEY

__all__ = [
    "EmployeeRow",
    "MealRecordRow",
    "PaymentRecordRow",
    "AppSettingsRow",
    "SETTINGS_KEY",
]
