# smartassist/storage.py
"""
Persistence gateway: one method per entity operation over a SQLAlchemy session.

Lookups return None when the row does not exist; partial updates return None
for a missing id. Integrity violations (unknown foreign key, duplicate unique
value) are rolled back and raised as StorageError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Appliance, Booking, Diagnosis, Review, Technician, User
from .timing import timed_block

log = logging.getLogger(__name__)


class StorageError(Exception):
    """A write was rejected by the database (constraint violation)."""


class Storage:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------
    # helpers
    # ---------------------------
    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            log.warning("integrity error on %s: %s", what, e.orig)
            raise StorageError(f"{what} violates a database constraint: {e.orig}") from e

    def _insert(self, obj, what: str):
        self.db.add(obj)
        self._commit(what)
        self.db.refresh(obj)
        return obj

    def _patch(self, obj, data: Dict[str, Any], what: str):
        if obj is None:
            return None
        for key, value in data.items():
            setattr(obj, key, value)
        self._commit(what)
        self.db.refresh(obj)
        return obj

    # ---------------------------
    # Users
    # ---------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.username == username)).first()

    def create_user(self, data: Dict[str, Any]) -> User:
        return self._insert(User(**data), "user")

    # ---------------------------
    # Appliances
    # ---------------------------
    def get_appliance(self, appliance_id: str) -> Optional[Appliance]:
        return self.db.get(Appliance, appliance_id)

    def get_user_appliances(self, user_id: str) -> List[Appliance]:
        stmt = (
            select(Appliance)
            .where(Appliance.user_id == user_id)
            .order_by(Appliance.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def create_appliance(self, data: Dict[str, Any]) -> Appliance:
        return self._insert(Appliance(**data), "appliance")

    def update_appliance(self, appliance_id: str, data: Dict[str, Any]) -> Optional[Appliance]:
        return self._patch(self.get_appliance(appliance_id), data, "appliance")

    def delete_appliance(self, appliance_id: str) -> bool:
        """
        Delete one appliance. Diagnoses and bookings pointing at it keep their
        rows; the database sets their appliance_id to NULL.
        """
        result = self.db.execute(delete(Appliance).where(Appliance.id == appliance_id))
        self._commit("appliance delete")
        # drop any loaded dependents so later reads see the nulled reference
        self.db.expire_all()
        return result.rowcount > 0

    # ---------------------------
    # Diagnoses
    # ---------------------------
    def get_diagnosis(self, diagnosis_id: str) -> Optional[Diagnosis]:
        return self.db.get(Diagnosis, diagnosis_id)

    def get_user_diagnoses(self, user_id: str) -> List[Diagnosis]:
        stmt = (
            select(Diagnosis)
            .where(Diagnosis.user_id == user_id)
            .order_by(Diagnosis.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def create_diagnosis(self, data: Dict[str, Any]) -> Diagnosis:
        return self._insert(Diagnosis(**data), "diagnosis")

    def update_diagnosis(self, diagnosis_id: str, data: Dict[str, Any]) -> Optional[Diagnosis]:
        # updated_at is refreshed by the column's onupdate
        return self._patch(self.get_diagnosis(diagnosis_id), data, "diagnosis")

    # ---------------------------
    # Technicians
    # ---------------------------
    def get_technician(self, technician_id: str) -> Optional[Technician]:
        return self.db.get(Technician, technician_id)

    def get_all_technicians(self) -> List[Technician]:
        stmt = select(Technician).order_by(Technician.rating.desc(), Technician.name.asc())
        return list(self.db.scalars(stmt))

    def search_technicians(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        specialty: Optional[str] = None,
    ) -> List[Technician]:
        """
        city/state are exact matches done in SQL; specialty is a case-insensitive
        substring match against any entry of the specialties list, done here.
        No filters at all -> every technician, best rated first.
        """
        if not (city or state or specialty):
            return self.get_all_technicians()

        stmt = select(Technician)
        if city:
            stmt = stmt.where(Technician.city == city)
        if state:
            stmt = stmt.where(Technician.state == state)
        stmt = stmt.order_by(Technician.rating.desc(), Technician.name.asc())
        results = list(self.db.scalars(stmt))

        if specialty:
            needle = specialty.lower()
            results = [
                t for t in results
                if any(needle in (s or "").lower() for s in (t.specialties or []))
            ]
        return results

    def create_technician(self, data: Dict[str, Any]) -> Technician:
        return self._insert(Technician(**data), "technician")

    # ---------------------------
    # Bookings
    # ---------------------------
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.db.get(Booking, booking_id)

    def get_user_bookings(self, user_id: str) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def get_technician_bookings(self, technician_id: str) -> List[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.technician_id == technician_id)
            .order_by(Booking.scheduled_date.desc())
        )
        return list(self.db.scalars(stmt))

    def create_booking(self, data: Dict[str, Any]) -> Booking:
        return self._insert(Booking(**data), "booking")

    def update_booking(self, booking_id: str, data: Dict[str, Any]) -> Optional[Booking]:
        return self._patch(self.get_booking(booking_id), data, "booking")

    # ---------------------------
    # Reviews
    # ---------------------------
    def get_review(self, review_id: str) -> Optional[Review]:
        return self.db.get(Review, review_id)

    def get_technician_reviews(self, technician_id: str) -> List[Review]:
        stmt = (
            select(Review)
            .where(Review.technician_id == technician_id)
            .order_by(Review.created_at.desc())
        )
        return list(self.db.scalars(stmt))

    def create_review(self, data: Dict[str, Any]) -> Review:
        """
        Insert a review and recompute the technician's rating/total_reviews.
        The recompute is one UPDATE with aggregate subqueries, committed in the
        same transaction as the insert, so concurrent reviews cannot leave a
        stale average behind.
        """
        review = Review(**data)
        self.db.add(review)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise StorageError(f"review violates a database constraint: {e.orig}") from e

        tid = review.technician_id
        avg_rating = (
            select(func.round(func.avg(Review.rating), 2))
            .where(Review.technician_id == tid)
            .scalar_subquery()
        )
        review_count = (
            select(func.count(Review.id))
            .where(Review.technician_id == tid)
            .scalar_subquery()
        )
        with timed_block("recompute-rating", technician_id=tid):
            self.db.execute(
                update(Technician)
                .where(Technician.id == tid)
                .values(rating=avg_rating, total_reviews=review_count)
                .execution_options(synchronize_session=False)
            )
            self._commit("review")

        self.db.expire_all()
        self.db.refresh(review)
        return review
