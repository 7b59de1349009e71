"""Invoice router - FastAPI endpoints for invoices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from .service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    return InvoiceService(db)


@router.get("", response_model=list[InvoiceResponse])
async def get_invoices(
    customerId: Optional[int] = Query(None),
    jobId: Optional[int] = Query(None),
    status: Optional[str] = Query(None, description="Comma separated statuses"),
    search: Optional[str] = Query(None),
    fromDate: Optional[str] = Query(None),
    toDate: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoices = service.get_invoices(current_user, customerId, jobId, status, search, fromDate, toDate, limit)
    return [InvoiceResponse.from_model(i) for i in invoices]


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = await service.create_invoice(data, current_user)
    return InvoiceResponse.from_model(invoice, include_details=True)


@router.post("/reminders/process")
async def process_reminders(
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Run today's overdue marking and payment reminders for this company"""
    return await service.process_reminders(current_user)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return InvoiceResponse.from_model(service.get_invoice(invoice_id, current_user), include_details=True)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = service.update_invoice(invoice_id, data, current_user)
    return InvoiceResponse.from_model(invoice, include_details=True)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id, current_user)


@router.post("/{invoice_id}/send", response_model=InvoiceResponse)
async def send_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = await service.send_invoice(invoice_id, current_user)
    return InvoiceResponse.from_model(invoice, include_details=True)


@router.post("/{invoice_id}/send-reminder", response_model=InvoiceResponse)
async def send_invoice_reminder(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    invoice = await service.send_reminder(invoice_id, current_user)
    return InvoiceResponse.from_model(invoice)
