"""Job domain schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class JobTaskInput(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    order: Optional[int] = None


class JobBase(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    jobType: Optional[str] = None
    customerId: Optional[int] = None
    planId: Optional[int] = None
    # ids, {"employeeId", "payAmount"} objects, or None
    assignedEmployees: Optional[list[Any]] = None
    assignedTo: Optional[Any] = None
    employeePay: Optional[Any] = None
    location: Optional[str] = None
    addressLine2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accessInstructions: Optional[str] = None
    parkingInstructions: Optional[str] = None
    specialInstructions: Optional[str] = None
    scheduledFor: Optional[str] = None
    scheduledEnd: Optional[str] = None
    durationMinutes: Optional[Any] = None
    recurrence: Optional[str] = None
    priority: Optional[str] = None
    estimatedPrice: Optional[float] = None
    currency: Optional[str] = None
    internalNotes: Optional[str] = None

    @field_validator("title", "location")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class JobCreate(JobBase):
    tasks: Optional[list[JobTaskInput]] = None
    allowPast: bool = False
    backCreateComplete: bool = False


class JobUpdate(JobBase):
    status: Optional[str] = None
    completedAt: Optional[str] = None
    actualPrice: Optional[float] = None
    qualityRating: Optional[int] = None
    customerFeedback: Optional[str] = None


class JobStartRequest(BaseModel):
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class JobCompleteRequest(BaseModel):
    actualPrice: Optional[float] = None
    qualityRating: Optional[int] = None
    notes: Optional[str] = None
    sendCustomerNotification: bool = True


class JobCancelRequest(BaseModel):
    reason: Optional[str] = None
    notifyCustomer: bool = True
    notifyEmployees: bool = True


class EmployeeSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    payType: Optional[str] = None


class AssignmentResponse(BaseModel):
    employeeId: int
    payAmount: Optional[float] = None
    status: Optional[str] = None
    acceptedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    employee: Optional[EmployeeSummary] = None

    @classmethod
    def from_model(cls, a) -> "AssignmentResponse":
        employee = None
        if a.employee is not None:
            employee = EmployeeSummary(
                id=a.employee.id, name=a.employee.full_name, email=a.employee.email, payType=a.employee.pay_type
            )
        return cls(
            employeeId=a.employee_id,
            payAmount=a.pay_amount,
            status=a.status,
            acceptedAt=a.accepted_at,
            completedAt=a.completed_at,
            employee=employee,
        )


class JobTaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    order: Optional[int] = None
    completedBy: Optional[int] = None
    completedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, t) -> "JobTaskResponse":
        return cls(
            id=t.id,
            title=t.title,
            description=t.description,
            status=t.status,
            order=t.order,
            completedBy=t.completed_by,
            completedAt=t.completed_at,
        )


class JobCustomerSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class JobResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    jobType: Optional[str] = None
    customerId: Optional[int] = None
    customer: Optional[JobCustomerSummary] = None
    planId: Optional[int] = None
    assignedTo: Optional[int] = None
    assignedEmployeeIds: list[int] = []
    location: Optional[str] = None
    addressLine2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accessInstructions: Optional[str] = None
    parkingInstructions: Optional[str] = None
    specialInstructions: Optional[str] = None
    scheduledFor: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None
    durationMinutes: Optional[int] = None
    recurrence: Optional[str] = None
    status: str
    priority: Optional[str] = None
    completedAt: Optional[datetime] = None
    employeeAccepted: Optional[bool] = None
    employeeAcceptedAt: Optional[datetime] = None
    estimatedPrice: Optional[float] = None
    actualPrice: Optional[float] = None
    employeePay: Optional[float] = None
    currency: Optional[str] = None
    qualityRating: Optional[int] = None
    customerFeedback: Optional[str] = None
    internalNotes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    assignments: Optional[list[AssignmentResponse]] = None
    tasks: Optional[list[JobTaskResponse]] = None

    @classmethod
    def from_model(cls, job, include_details: bool = False) -> "JobResponse":
        customer = None
        if job.customer is not None:
            customer = JobCustomerSummary(
                id=job.customer.id, name=job.customer.full_name, email=job.customer.email, phone=job.customer.phone
            )
        assignments = None
        tasks = None
        if include_details:
            assignments = [AssignmentResponse.from_model(a) for a in job.assignments]
            tasks = [JobTaskResponse.from_model(t) for t in job.tasks]

        return cls(
            id=job.id,
            title=job.title,
            description=job.description,
            jobType=job.job_type,
            customerId=job.customer_id,
            customer=customer,
            planId=job.plan_id,
            assignedTo=job.assigned_to,
            assignedEmployeeIds=[a.employee_id for a in job.assignments],
            location=job.location,
            addressLine2=job.address_line2,
            city=job.city,
            postcode=job.postcode,
            latitude=job.latitude,
            longitude=job.longitude,
            accessInstructions=job.access_instructions,
            parkingInstructions=job.parking_instructions,
            specialInstructions=job.special_instructions,
            scheduledFor=job.scheduled_for,
            scheduledEnd=job.scheduled_end,
            durationMinutes=job.duration_minutes,
            recurrence=job.recurrence,
            status=job.status,
            priority=job.priority,
            completedAt=job.completed_at,
            employeeAccepted=job.employee_accepted,
            employeeAcceptedAt=job.employee_accepted_at,
            estimatedPrice=job.estimated_price,
            actualPrice=job.actual_price,
            employeePay=job.employee_pay,
            currency=job.currency,
            qualityRating=job.quality_rating,
            customerFeedback=job.customer_feedback,
            internalNotes=job.internal_notes,
            createdAt=job.created_at,
            updatedAt=job.updated_at,
            assignments=assignments,
            tasks=tasks,
        )


class JobEventResponse(BaseModel):
    id: int
    type: str
    message: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    actorId: Optional[int] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, e) -> "JobEventResponse":
        return cls(
            id=e.id, type=e.type, message=e.message, meta=e.meta, actorId=e.actor_id, createdAt=e.created_at
        )
