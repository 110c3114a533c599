# smartassist/seed.py
"""
Demo data: the placeholder user and a handful of technicians.
Idempotent; rows that already exist (by id / email) are left alone.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import PLACEHOLDER_USER_ID
from .models import Technician
from .storage import Storage
from .timing import timeit

log = logging.getLogger(__name__)

DEMO_USER = {
    "id": PLACEHOLDER_USER_ID,
    "username": "demo_user",
    "email": "demo@smartassist.ai",
    "password": "hashed_password_placeholder",
    "full_name": "Demo User",
    "phone": "(555) 123-4567",
    "address": "123 Main St",
    "city": "San Francisco",
    "state": "CA",
    "zip_code": "94102",
}

SAMPLE_TECHNICIANS = [
    {
        "name": "John Martinez",
        "email": "john.martinez@example.com",
        "phone": "(555) 234-5678",
        "bio": "Expert HVAC technician with 15+ years of experience in residential and commercial systems.",
        "specialties": ["HVAC", "Refrigeration", "Air Conditioning"],
        "city": "San Francisco", "state": "CA", "zip_code": "94102",
        "hourly_rate": Decimal("85.00"), "rating": Decimal("4.90"), "total_reviews": 127,
        "verified": True, "available": True,
    },
    {
        "name": "Sarah Chen",
        "email": "sarah.chen@example.com",
        "phone": "(555) 345-6789",
        "bio": "Certified appliance repair specialist focused on washers, dryers, and kitchen appliances.",
        "specialties": ["Appliances", "Washing Machines", "Dryers", "Dishwashers"],
        "city": "San Francisco", "state": "CA", "zip_code": "94103",
        "hourly_rate": Decimal("75.00"), "rating": Decimal("4.80"), "total_reviews": 94,
        "verified": True, "available": True,
    },
    {
        "name": "Michael Johnson",
        "email": "michael.johnson@example.com",
        "phone": "(555) 456-7890",
        "bio": "Licensed electrician specializing in appliance installation and electrical troubleshooting.",
        "specialties": ["Electrical", "Dishwashers", "Ovens", "Installation"],
        "city": "Oakland", "state": "CA", "zip_code": "94612",
        "hourly_rate": Decimal("90.00"), "rating": Decimal("4.70"), "total_reviews": 156,
        "verified": True, "available": False,
    },
    {
        "name": "Emily Rodriguez",
        "email": "emily.rodriguez@example.com",
        "phone": "(555) 567-8901",
        "bio": "Appliance repair expert with a focus on energy efficiency and preventive maintenance.",
        "specialties": ["Refrigeration", "Energy Efficiency", "Preventive Maintenance"],
        "city": "San Jose", "state": "CA", "zip_code": "95110",
        "hourly_rate": Decimal("80.00"), "rating": Decimal("4.90"), "total_reviews": 88,
        "verified": True, "available": True,
    },
    {
        "name": "David Kim",
        "email": "david.kim@example.com",
        "phone": "(555) 678-9012",
        "bio": "Commercial and residential HVAC specialist with factory certifications from major brands.",
        "specialties": ["HVAC", "Air Conditioning", "Heating Systems"],
        "city": "San Francisco", "state": "CA", "zip_code": "94110",
        "hourly_rate": Decimal("95.00"), "rating": Decimal("4.80"), "total_reviews": 142,
        "verified": True, "available": True,
    },
]


@timeit("seed")
def seed_database(db: Session, user_id: str = PLACEHOLDER_USER_ID, technicians: bool = True) -> dict:
    """Returns how many rows were inserted per table."""
    inserted = {"users": 0, "technicians": 0}

    storage = Storage(db)
    if storage.get_user(user_id) is None:
        storage.create_user({**DEMO_USER, "id": user_id})
        inserted["users"] += 1

    if technicians:
        existing = set(db.scalars(select(Technician.email)))
        for row in SAMPLE_TECHNICIANS:
            if row["email"] not in existing:
                db.add(Technician(**row))
                inserted["technicians"] += 1

    db.commit()
    log.info("seeded users=%s technicians=%s", inserted["users"], inserted["technicians"])
    return inserted
