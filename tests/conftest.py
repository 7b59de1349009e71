"""
CleanManager Backend - Test Configuration (conftest.py)

Shared fixtures for the test suite:
    - db: SQLAlchemy session on an in-memory SQLite database, fresh per test
    - client: HTTPX AsyncClient routed straight into the FastAPI app
    - company / admin_user / employee / customer / plan: a ready-made tenant
    - make_job: factory for scheduled jobs with one or more assignees
    - sent_emails: the mocked Resend send, so tests can inspect outgoing mail
"""

import os
from datetime import timedelta
from unittest.mock import AsyncMock, patch

# Override settings BEFORE any app imports
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RESEND_API_KEY"] = "re_test_key"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_HOST", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cleanmanager import models, models_inventory, models_invoice  # noqa: F401
from cleanmanager.auth import create_customer_token, create_employee_token, create_user_token
from cleanmanager.cache import cache
from cleanmanager.database import Base, get_db
from cleanmanager.main import app
from cleanmanager.models import CleaningPlan, Company, Customer, Employee, Job, JobAssignment, PlanTask, User
from cleanmanager.rate_limiter import reset_rate_limits
from cleanmanager.security_utils import hash_password
from cleanmanager.utils.dates import utc_now

TEST_PASSWORD = "Sparkle123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    """
    Async HTTP client talking to the app through ASGITransport.
    Requests share the test's session so fixtures and API calls see the same rows.
    """

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def sent_emails():
    """Every outgoing email is captured instead of hitting Resend"""
    with patch("cleanmanager.email_service.send_email", new_callable=AsyncMock) as mock_send:
        mock_send.return_value = {"id": "test-email"}
        yield mock_send


@pytest.fixture(autouse=True)
def reset_limits_and_codes():
    reset_rate_limits()
    cache.clear_memory()
    yield
    reset_rate_limits()
    cache.clear_memory()


def recipients_of(mock_send) -> list[str]:
    """Flatten the `to` argument of every captured send"""
    found = []
    for call in mock_send.call_args_list:
        to = call.kwargs.get("to") if "to" in call.kwargs else call.args[0]
        found.extend([to] if isinstance(to, str) else to)
    return found


# ══════════════════════════════════════════════════════════════════════════
# Tenant factories
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def company(db):
    company = Company(name="Sparkle Cleaning", email="office@sparkle.test", phone="020 7946 0000")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def other_company(db):
    company = Company(name="Rival Cleaners", email="office@rival.test")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def admin_user(db, company):
    user = User(
        company_id=company.id,
        email="owner@sparkle.test",
        password_hash=hash_password(TEST_PASSWORD),
        first_name="Olivia",
        last_name="Owner",
        role="owner",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_user_token(admin_user)}"}


@pytest.fixture
def make_employee(db, company):
    counter = {"n": 0}

    def _make(first_name="Ellie", last_name="Cleaner", company_id=None, status="active", **extra):
        counter["n"] += 1
        employee = Employee(
            company_id=company_id or company.id,
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}.{counter['n']}@staff.test",
            username=f"{first_name.lower()}{counter['n']}",
            password_hash=hash_password(TEST_PASSWORD),
            role="cleaner",
            status=status,
            pay_type="hourly",
            hourly_rate=12.5,
            **extra,
        )
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    return _make


@pytest.fixture
def employee(make_employee):
    return make_employee()


@pytest.fixture
def employee_headers(employee):
    return {"Authorization": f"Bearer {create_employee_token(employee)}"}


def employee_auth(employee) -> dict:
    return {"Authorization": f"Bearer {create_employee_token(employee)}"}


@pytest.fixture
def customer(db, company):
    customer = Customer(
        company_id=company.id,
        first_name="Carla",
        last_name="Customer",
        email="carla@customer.test",
        phone="07700 900 123",
        address="1 High Street",
        city="London",
        postcode="SW1A 1AA",
        country="United Kingdom",
        status="active",
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture
def customer_headers(customer):
    return {"Authorization": f"Bearer {create_customer_token(customer)}"}


@pytest.fixture
def plan(db, company):
    plan = CleaningPlan(
        company_id=company.id,
        name="Standard Clean",
        description="Weekly home clean",
        estimated_duration="2h",
        price=80.0,
        is_active=True,
    )
    db.add(plan)
    db.flush()
    db.add_all(
        [
            PlanTask(plan_id=plan.id, title="Kitchen", order=0),
            PlanTask(plan_id=plan.id, title="Bathrooms", order=1),
        ]
    )
    db.commit()
    db.refresh(plan)
    return plan


@pytest.fixture
def make_job(db, company, customer, plan):
    """Scheduled job assigned to the given employees, tomorrow by default"""

    def _make(employees=(), status="scheduled", starts_in=timedelta(days=1), **extra):
        start = utc_now() + starts_in
        fields = {
            "company_id": company.id,
            "title": "Weekly clean",
            "customer_id": customer.id,
            "plan_id": plan.id,
            "location": "1 High Street",
            "city": "London",
            "postcode": "SW1A 1AA",
            "scheduled_for": start,
            "scheduled_end": start + timedelta(hours=2),
            "duration_minutes": 120,
            "status": status,
            "estimated_price": plan.price,
            "employee_pay": 30.0,
        }
        fields.update(extra)
        job = Job(assigned_to=employees[0].id if employees else None, **fields)
        db.add(job)
        db.flush()
        for emp in employees:
            db.add(
                JobAssignment(
                    company_id=company.id,
                    job_id=job.id,
                    employee_id=emp.id,
                    pay_amount=30.0,
                    status="assigned",
                )
            )
        db.commit()
        db.refresh(job)
        return job

    return _make
