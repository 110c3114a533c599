# smartassist/client/pages.py
"""
Page view-models for the SmartAssist front end.

Each page is independent: it reads through the injected QueryCache, keeps its
own state ("loading" | "empty" | "error" | "ready"), and after a mutation
invalidates the cache keys the change affects. render() returns plain text.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from .api import ApiClient, ApiError
from .query_cache import QueryCache

MAX_IMAGE_BYTES = 5 * 1024 * 1024

TIME_SLOTS = [
    "9:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
    "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM", "5:00 PM",
]

APPLIANCE_TYPES = [
    ("refrigerator", "Refrigerator"),
    ("washing_machine", "Washing Machine"),
    ("dishwasher", "Dishwasher"),
    ("microwave", "Microwave"),
    ("air_conditioner", "Air Conditioner"),
    ("dryer", "Dryer"),
    ("oven", "Oven"),
    ("other", "Other"),
]

GREETING = (
    "Hello! I'm your AI appliance assistant. I can help diagnose issues with your "
    "home electronics and appliances. You can describe the problem in text, or upload "
    "a photo of an error code, damaged part, or any visible issue. How can I help you today?"
)


@dataclass
class Toast:
    title: str
    description: str
    variant: str = "default"  # or "destructive"


@dataclass
class Toaster:
    toasts: List[Toast] = field(default_factory=list)

    def toast(self, title: str, description: str, variant: str = "default") -> Toast:
        t = Toast(title, description, variant)
        self.toasts.append(t)
        return t

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _iso_datetime(value: Optional[str]) -> Optional[str]:
    """Form dates come in as 'YYYY-MM-DD'; the API wants a datetime."""
    if not value:
        return None
    return f"{value}T00:00:00" if len(value) == 10 else value


class Page:
    title = ""

    def __init__(self, api: ApiClient, cache: QueryCache, toaster: Optional[Toaster] = None):
        self.api = api
        self.cache = cache
        self.toaster = toaster or Toaster()
        self.state = "loading"
        self.error: Optional[str] = None
        self.data: Any = None

    def query(self) -> Any:
        return None

    def is_empty(self, data: Any) -> bool:
        return not data

    def load(self) -> "Page":
        self.state = "loading"
        try:
            self.data = self.query()
        except ApiError as e:
            self.state, self.error = "error", e.message
            return self
        self.error = None
        self.state = "empty" if self.is_empty(self.data) else "ready"
        return self

    def render(self) -> str:
        return self.title


class LandingPage(Page):
    title = "SmartAssist.ai"

    def load(self) -> "Page":
        self.state = "ready"
        return self

    def render(self) -> str:
        return "\n".join([
            "SmartAssist.ai - AI troubleshooting for your home appliances",
            "  - Describe a problem or upload a photo and get step-by-step help",
            "  - Keep your devices, warranties and serial numbers in one place",
            "  - Book a verified local technician when a repair needs a pro",
        ])


class DashboardPage(Page):
    title = "Dashboard"
    KEY = ("/api/stats",)
    EMPTY_STATS = {"totalDevices": 0, "activeDiagnoses": 0, "upcomingBookings": 0}

    def query(self):
        return self.cache.fetch(self.KEY, self.api.get_stats)

    def is_empty(self, data) -> bool:
        return False

    @property
    def stats(self) -> Dict[str, int]:
        return self.data or dict(self.EMPTY_STATS)

    def render(self) -> str:
        s = self.stats
        return (
            f"{self.title}\n"
            f"  Devices:            {s['totalDevices']}\n"
            f"  Active diagnoses:   {s['activeDiagnoses']}\n"
            f"  Upcoming bookings:  {s['upcomingBookings']}"
        )


class DevicesPage(Page):
    title = "My Devices"
    KEY = ("/api/appliances",)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.search_query = ""

    def query(self):
        return self.cache.fetch(self.KEY, self.api.list_appliances)

    def filtered(self) -> List[Dict[str, Any]]:
        q = self.search_query.lower()
        return [
            d for d in (self.data or [])
            if q in d["name"].lower()
            or q in d["type"].lower()
            or q in (d.get("brand") or "").lower()
        ]

    def add_device(self, form: Dict[str, str]) -> Optional[Dict[str, Any]]:
        payload = {k: (v or None) for k, v in form.items()}
        payload["purchaseDate"] = _iso_datetime(form.get("purchaseDate"))
        payload["warrantyExpiry"] = _iso_datetime(form.get("warrantyExpiry"))
        try:
            created = self.api.create_appliance(payload)
        except ApiError as e:
            self.toaster.toast("Error", e.message or "Failed to add device", "destructive")
            return None
        self.cache.invalidate("/api/appliances")
        self.cache.invalidate("/api/stats")
        self.toaster.toast("Device Added", "Your appliance has been registered successfully.")
        self.load()
        return created

    def remove_device(self, appliance_id: str) -> bool:
        try:
            self.api.delete_appliance(appliance_id)
        except ApiError as e:
            self.toaster.toast("Error", e.message or "Failed to remove device", "destructive")
            return False
        self.cache.invalidate("/api/appliances")
        self.cache.invalidate("/api/stats")
        self.load()
        return True

    def render(self) -> str:
        if self.state == "error":
            return f"{self.title}\n  Could not load devices: {self.error}"
        devices = self.filtered()
        if not devices:
            return f"{self.title}\n  No devices yet. Add your first appliance to get started."
        lines = [self.title]
        for d in devices:
            brand = " ".join(p for p in (d.get("brand"), d.get("model")) if p)
            lines.append(f"  - {d['name']} [{d['type']}]" + (f" {brand}" if brand else ""))
        return "\n".join(lines)


class DiagnosePage(Page):
    """
    Chat with the assistant. The transcript lives only in this object; the
    server keeps its own copy on the diagnosis record.
    """
    title = "AI Diagnosis"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.messages: List[Dict[str, Any]] = [self._message("assistant", GREETING)]
        self.diagnosis_id: Optional[str] = None
        self.is_loading = False
        self.state = "ready"

    @staticmethod
    def _message(role: str, content: str, image: Optional[str] = None) -> Dict[str, Any]:
        return {
            "id": uuid.uuid4().hex,
            "role": role,
            "content": content,
            "image": image,
            "timestamp": datetime.now(timezone.utc),
        }

    def load(self) -> "Page":
        return self

    def send(self, text: str, image: Optional[Tuple[str, bytes, str]] = None) -> bool:
        """
        image is (filename, bytes, content_type). Returns True when the
        assistant answered.
        """
        text = (text or "").strip()
        if not text and image is None:
            return False
        if image is not None and len(image[1]) > MAX_IMAGE_BYTES:
            self.toaster.toast("File too large", "Please select an image under 5MB", "destructive")
            return False

        history = [{"role": m["role"], "content": m["content"]} for m in self.messages if m["content"]]
        self.messages.append(self._message("user", text, image[0] if image else None))
        self.is_loading = True
        try:
            if image is not None:
                filename, content, content_type = image
                data = self.api.analyze_image(filename, content, content_type, user_description=text)
                reply = data["analysis"]
            else:
                data = self.api.diagnose(text, history, diagnosis_id=self.diagnosis_id)
                reply = data["response"]
                self.diagnosis_id = data["diagnosisId"]
        except ApiError:
            self.toaster.toast("Error", "Failed to get AI response. Please try again.", "destructive")
            return False
        finally:
            self.is_loading = False

        self.messages.append(self._message("assistant", reply))
        self.cache.invalidate("/api/diagnoses")
        self.cache.invalidate("/api/stats")
        return True

    def render(self) -> str:
        lines = [self.title]
        for m in self.messages:
            who = "You" if m["role"] == "user" else "Assistant"
            suffix = f" [photo: {m['image']}]" if m.get("image") else ""
            lines.append(f"{who}: {m['content']}{suffix}")
        return "\n".join(lines)


class TechniciansPage(Page):
    title = "Find a Technician"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selected_city = ""
        self.selected_specialty = ""
        self.search_query = ""

    @staticmethod
    def _filter_value(value: str) -> Optional[str]:
        return None if not value or value == "all" else value

    @property
    def key(self) -> tuple:
        return ("/api/technicians", self.selected_city, self.selected_specialty)

    def query(self):
        return self.cache.fetch(self.key, lambda: self.api.list_technicians(
            city=self._filter_value(self.selected_city),
            specialty=self._filter_value(self.selected_specialty),
        ))

    def filtered(self) -> List[Dict[str, Any]]:
        q = self.search_query.lower()
        return [
            t for t in (self.data or [])
            if q in t["name"].lower() or any(q in s.lower() for s in t["specialties"])
        ]

    def render(self) -> str:
        if self.state == "error":
            return f"{self.title}\n  Could not load technicians: {self.error}"
        techs = self.filtered()
        if not techs:
            return f"{self.title}\n  No technicians match your filters."
        lines = [self.title]
        for t in techs:
            flags = [f for f, on in (("verified", t["verified"]), ("unavailable", not t["available"])) if on]
            lines.append(
                f"  - {t['name']} ({t['city']}, {t['state']}) "
                f"rating {t['rating']} from {t['totalReviews']} reviews, "
                f"${t.get('hourlyRate') or '-'}/hr"
                + (f" [{', '.join(flags)}]" if flags else "")
            )
            lines.append(f"      {', '.join(t['specialties'])}  id={t['id']}")
        return "\n".join(lines)


class BookTechnicianPage(Page):
    title = "Book Technician"

    def __init__(self, api: ApiClient, cache: QueryCache, technician_id: str,
                 toaster: Optional[Toaster] = None):
        super().__init__(api, cache, toaster)
        self.technician_id = technician_id
        self.is_submitting = False

    def query(self):
        return self.cache.fetch(
            ("/api/technicians", self.technician_id),
            lambda: self.api.get_technician(self.technician_id),
        )

    @property
    def technician(self) -> Optional[Dict[str, Any]]:
        return self.data

    def estimated_cost(self, time_slot: str) -> Decimal:
        """Two hours at the technician's rate once a slot is picked."""
        if not time_slot or not self.technician:
            return Decimal("0")
        return _decimal(self.technician.get("hourlyRate") or 0) * 2

    def submit(self, day: Optional[date], time_slot: str, service_type: str, description: str,
               appliance_id: Optional[str] = None, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        if not day or not time_slot or not service_type or not description:
            self.toaster.toast("Missing Information", "Please fill in all required fields", "destructive")
            return None
        if time_slot not in TIME_SLOTS:
            self.toaster.toast("Invalid Time", f"Unknown time slot: {time_slot}", "destructive")
            return None

        slot = datetime.strptime(time_slot, "%I:%M %p").time()
        scheduled = datetime.combine(day, time(slot.hour, slot.minute))
        # local wall-clock time; a slot earlier today counts as past
        if scheduled <= (now or datetime.now()):
            self.toaster.toast("Invalid Date", "Please choose a date and time in the future", "destructive")
            return None

        payload = {
            "technicianId": self.technician_id,
            "applianceId": appliance_id or None,
            "serviceType": service_type,
            "problemDescription": description,
            "scheduledDate": scheduled.isoformat(),
            "estimatedCost": str(self.estimated_cost(time_slot)),
        }

        self.is_submitting = True
        try:
            booking = self.api.create_booking(payload)
        except ApiError as e:
            self.toaster.toast("Error", e.message or "Failed to create booking", "destructive")
            return None
        finally:
            self.is_submitting = False

        self.cache.invalidate("/api/bookings")
        self.cache.invalidate("/api/stats")
        self.toaster.toast("Booking Requested", "Your service request has been sent to the technician.")
        return booking

    def render(self) -> str:
        if self.state == "error":
            return f"{self.title}\n  {self.error}"
        t = self.technician
        if not t:
            return f"{self.title}\n  Loading..."
        return (
            f"{self.title}: {t['name']}\n"
            f"  {t.get('bio') or ''}\n"
            f"  Specialties: {', '.join(t['specialties'])}\n"
            f"  Rate: ${t.get('hourlyRate') or '-'}/hr, estimate for a visit: ${self.estimated_cost('slot')}\n"
            f"  Time slots: {', '.join(TIME_SLOTS)}"
        )


class BookingsPage(Page):
    title = "My Bookings"
    KEY = ("/api/bookings",)

    def query(self):
        return self.cache.fetch(self.KEY, self.api.list_bookings)

    def _technician_name(self, technician_id: str) -> str:
        try:
            tech = self.cache.fetch(
                ("/api/technicians", technician_id),
                lambda: self.api.get_technician(technician_id),
            )
        except ApiError:
            return technician_id
        return tech["name"]

    def cancel(self, booking_id: str) -> bool:
        try:
            self.api.update_booking(booking_id, {"status": "cancelled"})
        except ApiError as e:
            self.toaster.toast("Error", e.message or "Failed to cancel booking", "destructive")
            return False
        self.cache.invalidate("/api/bookings")
        self.cache.invalidate("/api/stats")
        self.toaster.toast("Booking Cancelled", "Your booking has been cancelled.")
        self.load()
        return True

    def start_payment(self, booking: Dict[str, Any]) -> Optional[str]:
        """Returns the processor client secret for the booking's estimated cost."""
        amount = float(_decimal(booking.get("estimatedCost") or 0))
        try:
            secret = self.api.create_payment_intent(amount, booking_id=booking["id"])
        except ApiError as e:
            self.toaster.toast("Payment Error", e.message, "destructive")
            return None
        self.cache.invalidate("/api/bookings")
        return secret

    def render(self) -> str:
        if self.state == "error":
            return f"{self.title}\n  Could not load bookings: {self.error}"
        if not self.data:
            return (
                f"{self.title}\n"
                "  No bookings yet. When you book a technician for service, "
                "your appointments will appear here."
            )
        lines = [self.title]
        for b in self.data:
            lines.append(
                f"  - {b['scheduledDate']}  {self._technician_name(b['technicianId'])}  "
                f"{b['serviceType']}  [{b['status']}/{b['paymentStatus']}]  id={b['id']}"
            )
        return "\n".join(lines)
