"""
Equipment, supplies and employee supply requests
"""

from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Equipment(Base):
    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    serial_number = Column(String(100), nullable=True)
    status = Column(String(50), default="available")  # available, in-use, maintenance, retired
    condition = Column(String(50), nullable=True)
    assigned_to = Column(Integer, ForeignKey("employees.id"), nullable=True)
    purchase_date = Column(Date, nullable=True)
    purchase_price = Column(Float, nullable=True)
    warranty_expires = Column(Date, nullable=True)
    last_maintenance_date = Column(Date, nullable=True)
    next_maintenance_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assigned_employee = relationship("Employee")


class Supply(Base):
    __tablename__ = "supplies"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    sku = Column(String(100), nullable=True)
    quantity = Column(Integer, default=0)
    unit = Column(String(50), nullable=True)
    min_quantity = Column(Integer, default=5)
    unit_cost = Column(Float, nullable=True)
    supplier = Column(String(255), nullable=True)
    status = Column(String(50), default="in-stock")  # in-stock, low-stock, out-of-stock
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SupplyRequest(Base):
    """Supplies an employee asks the office for"""

    __tablename__ = "supply_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    items = Column(JSON, nullable=False)  # [{"name": str, "quantity": int, ...}]
    urgency = Column(String(20), default="normal")  # low, normal, high, urgent
    notes = Column(Text, nullable=True)
    needed_by = Column(DateTime, nullable=True)
    status = Column(String(50), default="pending")  # pending, approved, denied, fulfilled, cancelled
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)
    fulfilled_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
