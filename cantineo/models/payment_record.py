"""
Payment record model
"""
from sqlalchemy import Column, String, ForeignKey
from cantineo.database import Base, Money


class PaymentRecordRow(Base):
    """Money received from an employee"""
    __tablename__ = "payments"

    id = Column(String, primary_key=True)
    employee_id = Column(String, ForeignKey("employees.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    amount = Column(Money, nullable=False)
