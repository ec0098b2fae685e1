"""
Employee model
"""
from sqlalchemy import Column, String
from cantineo.database import Base


class EmployeeRow(Base):
    __tablename__ = "employees"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, default="")
