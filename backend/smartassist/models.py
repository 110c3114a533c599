# smartassist/models.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# jsonb on Postgres, plain JSON text elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


DIAGNOSIS_STATUSES = ("open", "resolved", "escalated")
BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
PAYMENT_STATUSES = ("unpaid", "paid", "refunded")


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(Text, nullable=False, unique=True)
    email = Column(Text, nullable=False, unique=True)
    password = Column(Text, nullable=False)  # placeholder; auth is not wired
    full_name = Column(Text)
    phone = Column(Text)
    address = Column(Text)
    city = Column(Text)
    state = Column(Text)
    zip_code = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    appliances = relationship("Appliance", back_populates="user", passive_deletes=True)
    diagnoses = relationship("Diagnosis", back_populates="user", passive_deletes=True)
    bookings = relationship("Booking", back_populates="user", passive_deletes=True)


class Appliance(Base):
    __tablename__ = "appliances"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)   # e.g. "Kitchen Refrigerator"
    type = Column(Text, nullable=False)   # e.g. "refrigerator", "washing_machine"
    brand = Column(Text)
    model = Column(Text)
    serial_number = Column(Text)
    purchase_date = Column(DateTime(timezone=True))
    warranty_expiry = Column(DateTime(timezone=True))
    manual_url = Column(Text)
    image_url = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship("User", back_populates="appliances")


class Diagnosis(Base):
    __tablename__ = "diagnoses"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appliance_id = Column(String(36), ForeignKey("appliances.id", ondelete="SET NULL"))
    issue = Column(Text, nullable=False)
    messages = Column(JSONType, nullable=False, default=list)  # [{"role": ..., "content": ...}]
    diagnosis = Column(Text)
    solution = Column(Text)
    image_url = Column(Text)
    image_analysis = Column(Text)
    status = Column(String(20), nullable=False, default="open")
    resolved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="diagnoses")


class Technician(Base):
    __tablename__ = "technicians"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=False)
    bio = Column(Text)
    profile_image = Column(Text)
    specialties = Column(JSONType, nullable=False, default=list)  # e.g. ["HVAC", "Refrigeration"]
    service_radius = Column(Integer, nullable=False, default=25)  # miles
    city = Column(Text, nullable=False)
    state = Column(Text, nullable=False)
    zip_code = Column(Text, nullable=False)
    hourly_rate = Column(Numeric(10, 2))
    rating = Column(Numeric(3, 2), nullable=False, default=Decimal("0.00"))
    total_reviews = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    bookings = relationship("Booking", back_populates="technician", passive_deletes=True)


class Booking(Base):
    __tablename__ = "bookings"
    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    technician_id = Column(String(36), ForeignKey("technicians.id", ondelete="CASCADE"), nullable=False, index=True)
    appliance_id = Column(String(36), ForeignKey("appliances.id", ondelete="SET NULL"))
    diagnosis_id = Column(String(36), ForeignKey("diagnoses.id", ondelete="SET NULL"))
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    service_type = Column(Text, nullable=False)  # repair, maintenance, installation
    problem_description = Column(Text, nullable=False)
    estimated_cost = Column(Numeric(10, 2))
    actual_cost = Column(Numeric(10, 2))
    payment_status = Column(String(20), nullable=False, default="unpaid")
    stripe_payment_intent_id = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="bookings")
    technician = relationship("Technician", back_populates="bookings")


class Review(Base):
    __tablename__ = "reviews"
    id = Column(String(36), primary_key=True, default=_uuid)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    technician_id = Column(String(36), ForeignKey("technicians.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1..5
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
