"""Customer portal router - login code and the customer's own records"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_customer
from ...database import get_db
from ...models import Customer
from ...rate_limiter import create_rate_limiter
from ..customers.schemas import CustomerResponse
from ..invoices.schemas import InvoiceResponse
from .schemas import (
    BookingCreate,
    BookingResponse,
    LoginCodeVerify,
    LoginResponse,
    PortalCustomerSummary,
    PortalJobResponse,
    PortalProfileUpdate,
)
from .service import CustomerPortalService

router = APIRouter(prefix="/customer-portal", tags=["Customer Portal"])

code_request_limiter = create_rate_limiter(
    limit=5,
    window_seconds=60,
    key_prefix="portal_code_request",
    message="Too many requests. Please try again later.",
)
code_verify_limiter = create_rate_limiter(
    limit=5,
    window_seconds=60,
    key_prefix="portal_code_verify",
    message="Too many attempts. Please try again later.",
)


def get_customer_portal_service(db: Session = Depends(get_db)) -> CustomerPortalService:
    return CustomerPortalService(db)


@router.get("/auth")
async def request_login_code(
    email: Optional[str] = Query(None),
    _: None = Depends(code_request_limiter),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    return await service.request_code(email)


@router.post("/auth", response_model=LoginResponse)
async def verify_login_code(
    data: LoginCodeVerify,
    _: None = Depends(code_verify_limiter),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    token, customer = service.verify_code(data)
    return LoginResponse(
        token=token,
        customer=PortalCustomerSummary(
            id=customer.id,
            firstName=customer.first_name,
            lastName=customer.last_name,
            name=customer.full_name,
            email=customer.email,
            companyId=customer.company_id,
            companyName=customer.company.name if customer.company else None,
        ),
    )


@router.get("/jobs", response_model=list[PortalJobResponse])
async def get_my_jobs(
    customer: Customer = Depends(get_current_customer),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    company_name = service.company_name(customer)
    return [PortalJobResponse.from_model(j, company_name) for j in service.get_jobs(customer)]


@router.get("/invoices", response_model=list[InvoiceResponse])
async def get_my_invoices(
    customer: Customer = Depends(get_current_customer),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    return [InvoiceResponse.from_model(i, include_details=True) for i in service.get_invoices(customer)]


@router.get("/profile", response_model=CustomerResponse)
async def get_my_profile(customer: Customer = Depends(get_current_customer)):
    return CustomerResponse.from_model(customer)


@router.patch("/profile", response_model=CustomerResponse)
async def update_my_profile(
    data: PortalProfileUpdate,
    customer: Customer = Depends(get_current_customer),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    return CustomerResponse.from_model(service.update_profile(data, customer))


@router.get("/bookings", response_model=list[BookingResponse])
async def get_my_bookings(
    customer: Customer = Depends(get_current_customer),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    return [BookingResponse.from_model(b) for b in service.get_bookings(customer)]


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    customer: Customer = Depends(get_current_customer),
    service: CustomerPortalService = Depends(get_customer_portal_service),
):
    return BookingResponse.from_model(await service.create_booking(data, customer))
