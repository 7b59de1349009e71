from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
    country = Column(String(100), default="United Kingdom")
    business_type = Column(String(100), nullable=True)
    subscription_plan = Column(String(50), default="trial")  # trial, starter, pro
    subscription_status = Column(String(50), default="active")
    max_employees = Column(Integer, default=0)  # 0 = unlimited
    payment_instructions = Column(Text, nullable=True)
    notification_settings = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="company", cascade="all, delete-orphan")
    employees = relationship("Employee", back_populates="company", cascade="all, delete-orphan")
    customers = relationship("Customer", back_populates="company", cascade="all, delete-orphan")


class User(Base):
    """Company back-office account (owner, admin, manager)"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(50), default="admin")  # owner, admin, manager
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="users")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    username = Column(String(255), unique=True, index=True, nullable=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(String(100), nullable=True)  # cleaner, supervisor, ...
    employment_type = Column(String(50), nullable=True)  # full-time, part-time, contractor
    status = Column(String(50), default="active")  # active, inactive
    pay_type = Column(String(50), default="hourly")  # hourly, per_job, salary
    hourly_rate = Column(Float, nullable=True)
    salary = Column(Float, nullable=True)
    payment_frequency = Column(String(50), nullable=True)
    start_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="employees")
    assignments = relationship(
        "JobAssignment", back_populates="employee", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    alternate_phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    customer_type = Column(String(50), default="residential")  # residential, commercial
    status = Column(String(50), default="active")  # active, inactive
    access_instructions = Column(Text, nullable=True)
    parking_instructions = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)
    preferred_contact_method = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company", back_populates="customers")
    jobs = relationship("Job", back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class CleaningPlan(Base):
    """Reusable task checklist template applied to jobs"""

    __tablename__ = "cleaning_plans"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    estimated_duration = Column(String(50), nullable=True)  # e.g. "2h 30m"
    price = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tasks = relationship(
        "PlanTask",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanTask.order",
    )


class PlanTask(Base):
    __tablename__ = "plan_tasks"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("cleaning_plans.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order = Column(Integer, default=0)

    created_at = Column(DateTime, server_default=func.now())

    plan = relationship("CleaningPlan", back_populates="tasks")


class Job(Base):
    """A scheduled cleaning engagement for one customer"""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    job_type = Column(String(100), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    assigned_to = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    plan_id = Column(Integer, ForeignKey("cleaning_plans.id"), nullable=True)

    # Location
    location = Column(String(500), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    access_instructions = Column(Text, nullable=True)
    parking_instructions = Column(Text, nullable=True)
    special_instructions = Column(Text, nullable=True)

    # Scheduling
    scheduled_for = Column(DateTime, nullable=True, index=True)
    scheduled_end = Column(DateTime, nullable=True)
    duration_minutes = Column(Integer, default=60)
    recurrence = Column(String(50), default="none")
    status = Column(String(50), default="scheduled", index=True)  # scheduled, in-progress, completed, cancelled
    priority = Column(String(50), default="normal")
    completed_at = Column(DateTime, nullable=True)
    employee_accepted = Column(Boolean, default=False)
    employee_accepted_at = Column(DateTime, nullable=True)

    # Money
    estimated_price = Column(Float, nullable=True)
    actual_price = Column(Float, nullable=True)
    employee_pay = Column(Float, nullable=True)
    currency = Column(String(10), default="GBP")

    # Feedback
    quality_rating = Column(Integer, nullable=True)
    customer_feedback = Column(Text, nullable=True)
    feedback_token = Column(String(100), unique=True, nullable=True, index=True)

    internal_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="jobs")
    assignee = relationship("Employee", foreign_keys=[assigned_to])
    plan = relationship("CleaningPlan")
    assignments = relationship(
        "JobAssignment", back_populates="job", cascade="all, delete-orphan"
    )
    tasks = relationship(
        "JobTask", back_populates="job", cascade="all, delete-orphan", order_by="JobTask.order"
    )
    check_ins = relationship("JobCheckIn", back_populates="job", cascade="all, delete-orphan")
    events = relationship("JobEvent", back_populates="job", cascade="all, delete-orphan")


class JobAssignment(Base):
    __tablename__ = "job_assignments"
    __table_args__ = (UniqueConstraint("job_id", "employee_id", name="uq_job_assignment"),)

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    pay_amount = Column(Float, nullable=True)
    status = Column(String(50), default="assigned")  # assigned, accepted, declined, completed
    accepted_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    job = relationship("Job", back_populates="assignments")
    employee = relationship("Employee", back_populates="assignments")


class JobTask(Base):
    __tablename__ = "job_tasks"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(50), default="pending")  # pending, in-progress, completed
    order = Column(Integer, default=0)
    completed_by = Column(Integer, ForeignKey("employees.id"), nullable=True)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    job = relationship("Job", back_populates="tasks")


class JobCheckIn(Base):
    """GPS-stamped check-in / check-out record"""

    __tablename__ = "job_check_ins"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # check_in, check_out
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location_accuracy = Column(Float, nullable=True)
    captured_address = Column(String(500), nullable=True)
    distance_from_job_site = Column(Float, nullable=True)
    is_within_range = Column(Boolean, default=False)
    device_type = Column(String(50), nullable=True)
    device_model = Column(String(100), nullable=True)
    user_agent = Column(String(500), nullable=True)
    checked_at = Column(DateTime, server_default=func.now(), nullable=False)

    job = relationship("Job", back_populates="check_ins")
    employee = relationship("Employee")


class JobEvent(Base):
    __tablename__ = "job_events"

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    type = Column(String(100), nullable=False)
    message = Column(Text, nullable=True)
    meta = Column(JSON, nullable=True)
    actor_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    job = relationship("Job", back_populates="events")


class CustomerFeedback(Base):
    __tablename__ = "customer_feedback"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=True)
    feedback_token = Column(String(100), nullable=True)
    response = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    customer = relationship("Customer")
    job = relationship("Job")


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # vacation, sick, personal, ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(Integer, default=0)
    reason = Column(Text, nullable=True)
    status = Column(String(50), default="pending")  # pending, approved, denied, cancelled
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")


class ShiftSwapRequest(Base):
    __tablename__ = "shift_swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    from_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    to_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    from_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    to_job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False)
    requested_by_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    requested_by_role = Column(String(20), default="company")  # company, employee
    status = Column(String(50), default="pending")  # pending, approved, rejected
    reason = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    from_employee = relationship("Employee", foreign_keys=[from_employee_id])
    to_employee = relationship("Employee", foreign_keys=[to_employee_id])
    from_job = relationship("Job", foreign_keys=[from_job_id])
    to_job = relationship("Job", foreign_keys=[to_job_id])


class BookingRequest(Base):
    """Booking submitted by a customer from the self-service portal"""

    __tablename__ = "booking_requests"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("cleaning_plans.id"), nullable=True)
    preferred_date = Column(DateTime, nullable=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(50), default="pending")  # pending, converted, declined
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    converted_job_id = Column(Integer, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True)
    converted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    company = relationship("Company")
    customer = relationship("Customer")
    plan = relationship("CleaningPlan")


class EventLog(Base):
    """Company-wide audit trail"""

    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    event_type = Column(String(100), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, nullable=True)
    user_id = Column(Integer, nullable=True)
    employee_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    meta = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
