"""
Meal record model - one row per employee per day eaten
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, UniqueConstraint
from cantineo.database import Base


class MealRecordRow(Base):
    """A meal taken by an employee on a calendar day"""
    __tablename__ = "meals"

    id = Column(String, primary_key=True)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    paid = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_meal_employee_date"),
    )
