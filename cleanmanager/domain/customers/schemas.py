"""Customer domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CustomerCreate(BaseModel):
    """Fields are optional here so the service can answer with a 400 naming what's missing"""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    alternatePhone: Optional[str] = None
    address: Optional[str] = None
    addressLine2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    customerType: Optional[str] = None
    accessInstructions: Optional[str] = None
    parkingInstructions: Optional[str] = None
    specialInstructions: Optional[str] = None
    preferredContactMethod: Optional[str] = None
    notes: Optional[str] = None


class CustomerUpdate(CustomerCreate):
    status: Optional[str] = None


class CustomerStatusUpdate(BaseModel):
    status: Optional[str] = None


class CustomerResponse(BaseModel):
    id: int
    firstName: str
    lastName: str
    name: str
    email: str
    phone: Optional[str] = None
    alternatePhone: Optional[str] = None
    address: Optional[str] = None
    addressLine2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    customerType: Optional[str] = None
    status: Optional[str] = None
    accessInstructions: Optional[str] = None
    parkingInstructions: Optional[str] = None
    specialInstructions: Optional[str] = None
    preferredContactMethod: Optional[str] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, c) -> "CustomerResponse":
        return cls(
            id=c.id,
            firstName=c.first_name,
            lastName=c.last_name,
            name=c.full_name,
            email=c.email,
            phone=c.phone,
            alternatePhone=c.alternate_phone,
            address=c.address,
            addressLine2=c.address_line2,
            city=c.city,
            postcode=c.postcode,
            country=c.country,
            customerType=c.customer_type,
            status=c.status,
            accessInstructions=c.access_instructions,
            parkingInstructions=c.parking_instructions,
            specialInstructions=c.special_instructions,
            preferredContactMethod=c.preferred_contact_method,
            notes=c.notes,
            createdAt=c.created_at,
            updatedAt=c.updated_at,
        )
