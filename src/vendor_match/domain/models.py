"""SQLAlchemy ORM models for vendors, service requests and their matches.

All models use SQLite-compatible types:
- String(36) for UUID primary keys
- JSON for structured data (no JSONB)
- DateTime for timestamps (no TIMESTAMPTZ)

The scoring service only reads these tables; intake and match workflows
write them.
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vendor_match.infra.database import Base


# ---------------------------------------------------------------------------
# Vendor
# ---------------------------------------------------------------------------


class Vendor(Base):
    """Service provider that can be matched to landlord requests."""

    __tablename__ = "vendors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(String(20), nullable=False, default="pending_review", index=True)  # VendorStatus
    business_name = Column(String(255), nullable=False)
    contact_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    # What and where
    services = Column(JSON, default=list)  # ["plumbing", "hvac", ...]
    service_areas = Column(JSON, default=list)  # ["19103", "prefix:191", "state:PA"]
    service_specialties = Column(JSON, nullable=True)  # {"hvac": ["heat pump", ...]}
    job_size_range = Column(JSON, default=list)  # ["1k_5k", "5k_10k"]

    # Availability
    emergency_services = Column(Boolean, default=False)
    service_hours_weekdays = Column(Boolean, default=True)
    service_hours_weekends = Column(Boolean, default=False)
    service_hours_24_7 = Column(Boolean, default=False)

    # Vetting inputs
    licensed = Column(Boolean, default=False)
    insured = Column(Boolean, default=False)
    years_in_business = Column(Float, nullable=True)
    vetting_admin_adjustment = Column(Float, default=0.0)

    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    matches = relationship("RequestVendorMatch", back_populates="vendor")


# ---------------------------------------------------------------------------
# Service request
# ---------------------------------------------------------------------------


class ServiceRequest(Base):
    """A landlord's request for work on a property."""

    __tablename__ = "service_requests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    landlord_email = Column(String(255), nullable=True)
    landlord_name = Column(String(255), nullable=True)

    property_location = Column(String(500), nullable=False, default="")
    zip_code = Column(String(10), nullable=True)

    service_type = Column(String(50), nullable=False, index=True)
    service_details = Column(JSON, nullable=True)  # {"Equipment Type": "Heat pump", ...}
    job_description = Column(Text, nullable=True)
    urgency = Column(String(20), nullable=False, default="medium")  # Urgency
    budget_range = Column(String(30), nullable=True)  # "1000_2500", "not_sure", ...

    status = Column(String(30), nullable=False, default="new")
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    matches = relationship("RequestVendorMatch", back_populates="request")


# ---------------------------------------------------------------------------
# Request / vendor match
# ---------------------------------------------------------------------------


class RequestVendorMatch(Base):
    """A vendor introduced to a request, with its outcome and review."""

    __tablename__ = "request_vendor_matches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = Column(String(36), ForeignKey("service_requests.id"), nullable=False, index=True)
    vendor_id = Column(String(36), ForeignKey("vendors.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending")  # MatchStatus
    intro_sent_at = Column(DateTime, nullable=True)
    vendor_accepted = Column(Boolean, nullable=True)
    vendor_responded_at = Column(DateTime, nullable=True)
    response_time_seconds = Column(Integer, nullable=True)
    declined_after_accept = Column(Boolean, default=False)
    job_completed = Column(Boolean, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Landlord review (1-5); dimension ratings are optional
    review_rating = Column(Integer, nullable=True)
    review_quality = Column(Integer, nullable=True)
    review_price = Column(Integer, nullable=True)
    review_timeline = Column(Integer, nullable=True)
    review_treatment = Column(Integer, nullable=True)
    review_text = Column(Text, nullable=True)
    review_submitted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=func.now())

    request = relationship("ServiceRequest", back_populates="matches")
    vendor = relationship("Vendor", back_populates="matches")
