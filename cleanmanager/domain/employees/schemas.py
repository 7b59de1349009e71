"""Employee domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class EmployeeCreate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    role: Optional[str] = None
    employmentType: Optional[str] = None
    startDate: Optional[date] = None
    payType: Optional[str] = None
    hourlyRate: Optional[float] = None
    salary: Optional[float] = None
    paymentFrequency: Optional[str] = None
    notes: Optional[str] = None


class EmployeeUpdate(EmployeeCreate):
    status: Optional[str] = None


class EmployeeResponse(BaseModel):
    """Never carries the password hash"""

    id: int
    firstName: str
    lastName: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
    employmentType: Optional[str] = None
    status: Optional[str] = None
    payType: Optional[str] = None
    hourlyRate: Optional[float] = None
    salary: Optional[float] = None
    paymentFrequency: Optional[str] = None
    startDate: Optional[date] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, emp) -> "EmployeeResponse":
        return cls(
            id=emp.id,
            firstName=emp.first_name,
            lastName=emp.last_name,
            name=emp.full_name,
            email=emp.email,
            phone=emp.phone,
            address=emp.address,
            city=emp.city,
            postcode=emp.postcode,
            country=emp.country,
            username=emp.username,
            role=emp.role,
            employmentType=emp.employment_type,
            status=emp.status,
            payType=emp.pay_type,
            hourlyRate=emp.hourly_rate,
            salary=emp.salary,
            paymentFrequency=emp.payment_frequency,
            startDate=emp.start_date,
            notes=emp.notes,
            createdAt=emp.created_at,
        )


class EmployeeCreatedResponse(EmployeeResponse):
    plainPassword: str
