"""Shared test infrastructure for the vendor matching test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- make_vendor: factory for Vendor rows
- make_request: factory for ServiceRequest rows
- make_match: factory for RequestVendorMatch rows (with optional review)
"""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from vendor_match.infra.database import Base

import vendor_match.domain.models  # noqa: F401

from vendor_match.domain.models import RequestVendorMatch, ServiceRequest, Vendor


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Vendor factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_vendor(db_session):
    """Factory that creates a Vendor row.

    Usage:
        vendor = await make_vendor(services=["hvac"], service_areas=["19103"])
    """
    async def _factory(
        business_name: str = "Test Plumbing Co",
        status: str = "active",
        services: list | None = None,
        service_areas: list | None = None,
        licensed: bool = True,
        insured: bool = True,
        years_in_business: float | None = 5,
        vetting_admin_adjustment: float = 0.0,
        emergency_services: bool = False,
        service_hours_weekends: bool = False,
        service_hours_24_7: bool = False,
        service_specialties: dict | None = None,
        job_size_range: list | None = None,
        vendor_id: str | None = None,
    ) -> Vendor:
        vendor = Vendor(
            id=vendor_id or str(uuid.uuid4()),
            business_name=business_name,
            status=status,
            services=services if services is not None else ["plumbing"],
            service_areas=service_areas if service_areas is not None else ["19103"],
            licensed=licensed,
            insured=insured,
            years_in_business=years_in_business,
            vetting_admin_adjustment=vetting_admin_adjustment,
            emergency_services=emergency_services,
            service_hours_weekdays=True,
            service_hours_weekends=service_hours_weekends,
            service_hours_24_7=service_hours_24_7,
            service_specialties=service_specialties,
            job_size_range=job_size_range or [],
        )
        db_session.add(vendor)
        await db_session.flush()
        return vendor

    return _factory


# ---------------------------------------------------------------------------
# Service request factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_request(db_session):
    """Factory that creates a ServiceRequest row.

    Usage:
        req = await make_request(service_type="hvac", urgency="emergency")
    """
    async def _factory(
        service_type: str = "plumbing",
        zip_code: str | None = "19103",
        property_location: str = "123 Walnut St, Philadelphia, PA 19103",
        urgency: str = "medium",
        budget_range: str | None = None,
        service_details: dict | None = None,
    ) -> ServiceRequest:
        request = ServiceRequest(
            id=str(uuid.uuid4()),
            landlord_email="landlord@test.com",
            service_type=service_type,
            zip_code=zip_code,
            property_location=property_location,
            urgency=urgency,
            budget_range=budget_range,
            service_details=service_details,
            job_description="Leaking pipe under the kitchen sink",
        )
        db_session.add(request)
        await db_session.flush()
        return request

    return _factory


# ---------------------------------------------------------------------------
# Match factory
# ---------------------------------------------------------------------------

@pytest.fixture
def make_match(db_session, make_request):
    """Factory that creates a RequestVendorMatch row, creating a request if needed.

    Usage:
        await make_match(vendor, status="completed", review_rating=5)
    """
    async def _factory(
        vendor: Vendor,
        request: ServiceRequest | None = None,
        status: str = "completed",
        vendor_accepted: bool | None = True,
        job_completed: bool | None = True,
        declined_after_accept: bool = False,
        response_time_seconds: int | None = None,
        review_rating: int | None = None,
        review_quality: int | None = None,
        days_ago: int = 10,
    ) -> RequestVendorMatch:
        if request is None:
            request = await make_request()
        when = datetime.utcnow() - timedelta(days=days_ago)
        match = RequestVendorMatch(
            id=str(uuid.uuid4()),
            request_id=request.id,
            vendor_id=vendor.id,
            status=status,
            vendor_accepted=vendor_accepted,
            vendor_responded_at=when if vendor_accepted is not None else None,
            response_time_seconds=response_time_seconds,
            declined_after_accept=declined_after_accept,
            job_completed=job_completed,
            completed_at=when if job_completed else None,
            review_rating=review_rating,
            review_quality=review_quality,
            review_submitted_at=when if review_rating is not None else None,
            created_at=when,
        )
        db_session.add(match)
        await db_session.flush()
        return match

    return _factory
