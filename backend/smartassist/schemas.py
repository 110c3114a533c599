# smartassist/schemas.py
"""
Pydantic request/response schemas.

JSON on the wire is camelCase (``applianceId``, ``scheduledDate``); Python
attributes stay snake_case. Inputs accept either spelling.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, constr
from pydantic.alias_generators import to_camel

DiagnosisStatus = Literal["open", "resolved", "escalated"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
PaymentStatus = Literal["unpaid", "paid", "refunded"]

NonEmpty = constr(strip_whitespace=True, min_length=1)


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # allows returning ORM objects directly
    )


# ---------------------------
# Users
# ---------------------------
class UserOut(ApiModel):
    id: str
    username: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    created_at: datetime


# ---------------------------
# Appliances
# ---------------------------
class ApplianceIn(ApiModel):
    name: NonEmpty
    type: NonEmpty
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    manual_url: Optional[str] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None


class ApplianceUpdate(ApiModel):
    name: Optional[NonEmpty] = None
    type: Optional[NonEmpty] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    purchase_date: Optional[datetime] = None
    warranty_expiry: Optional[datetime] = None
    manual_url: Optional[str] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None


class ApplianceOut(ApplianceIn):
    id: str
    user_id: str
    created_at: datetime


# ---------------------------
# Diagnoses
# ---------------------------
class ChatMessage(ApiModel):
    role: Literal["user", "assistant"]
    content: str


class DiagnoseIn(ApiModel):
    issue: NonEmpty
    appliance_type: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    conversation_history: List[ChatMessage] = Field(default_factory=list)
    appliance_id: Optional[str] = None
    diagnosis_id: Optional[str] = None  # set on follow-up turns of the same session


class DiagnoseOut(ApiModel):
    diagnosis_id: str
    response: str
    diagnosis: str
    solution: str


class ImageAnalysisOut(ApiModel):
    diagnosis_id: str
    analysis: str
    identified_issues: List[str]
    recommendations: str


class DiagnosisUpdate(ApiModel):
    appliance_id: Optional[str] = None
    issue: Optional[NonEmpty] = None
    messages: Optional[List[ChatMessage]] = None
    diagnosis: Optional[str] = None
    solution: Optional[str] = None
    image_url: Optional[str] = None
    image_analysis: Optional[str] = None
    status: Optional[DiagnosisStatus] = None
    resolved: Optional[bool] = None


class DiagnosisOut(ApiModel):
    id: str
    user_id: str
    appliance_id: Optional[str] = None
    issue: str
    messages: List[ChatMessage]
    diagnosis: Optional[str] = None
    solution: Optional[str] = None
    image_url: Optional[str] = None
    image_analysis: Optional[str] = None
    status: DiagnosisStatus
    resolved: bool
    created_at: datetime
    updated_at: datetime


# ---------------------------
# Technicians
# ---------------------------
class TechnicianIn(ApiModel):
    name: NonEmpty
    email: NonEmpty
    phone: NonEmpty
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    service_radius: int = Field(25, ge=0)
    city: NonEmpty
    state: NonEmpty
    zip_code: NonEmpty
    hourly_rate: Optional[Decimal] = Field(None, ge=0)
    verified: bool = False
    available: bool = True


class TechnicianOut(ApiModel):
    id: str
    name: str
    email: str
    phone: str
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    specialties: List[str]
    service_radius: int
    city: str
    state: str
    zip_code: str
    hourly_rate: Optional[Decimal] = None
    rating: Decimal
    total_reviews: int
    verified: bool
    available: bool
    created_at: datetime


# ---------------------------
# Bookings
# ---------------------------
class BookingIn(ApiModel):
    technician_id: NonEmpty
    appliance_id: Optional[str] = None
    diagnosis_id: Optional[str] = None
    scheduled_date: datetime
    status: BookingStatus = "pending"
    service_type: NonEmpty
    problem_description: NonEmpty
    estimated_cost: Optional[Decimal] = Field(None, ge=0)
    actual_cost: Optional[Decimal] = Field(None, ge=0)
    payment_status: PaymentStatus = "unpaid"
    stripe_payment_intent_id: Optional[str] = None
    notes: Optional[str] = None


class BookingUpdate(ApiModel):
    appliance_id: Optional[str] = None
    diagnosis_id: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    status: Optional[BookingStatus] = None
    service_type: Optional[NonEmpty] = None
    problem_description: Optional[NonEmpty] = None
    estimated_cost: Optional[Decimal] = Field(None, ge=0)
    actual_cost: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    stripe_payment_intent_id: Optional[str] = None
    notes: Optional[str] = None


class BookingOut(BookingIn):
    id: str
    user_id: str
    technician_id: str
    service_type: str
    problem_description: str
    created_at: datetime
    updated_at: datetime


# ---------------------------
# Reviews
# ---------------------------
class ReviewIn(ApiModel):
    booking_id: NonEmpty
    technician_id: NonEmpty
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None


class ReviewOut(ApiModel):
    id: str
    booking_id: str
    user_id: str
    technician_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime


# ---------------------------
# Payments & stats
# ---------------------------
class PaymentIntentIn(ApiModel):
    amount: Optional[float] = None  # major currency units, e.g. 170.50
    booking_id: Optional[str] = None


class PaymentIntentOut(ApiModel):
    client_secret: str


class StatsOut(ApiModel):
    total_devices: int
    active_diagnoses: int
    upcoming_bookings: int
