"""SQLAlchemy models for WeddingRSVP."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base

from .utils import utcnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return utcnow()


class Invite(Base):
    """One RSVP record per invite name."""

    __tablename__ = "rsvps"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, unique=True, index=True)
    # List of {"name", "meal_choice"}; NULL for single-guest records.
    guests = Column(JSON, nullable=True)
    attending = Column(Boolean, nullable=True)
    plus_one = Column(Boolean, default=False, nullable=False)
    plus_one_name = Column(String(255), default="", nullable=False)
    plus_one_meal_choice = Column(String(64), default="", nullable=False)
    meal_choice = Column(String(64), default="", nullable=False)
    accommodation = Column(Boolean, default=False, nullable=False)
    number_of_kids = Column(Integer, default=0, nullable=False)
    submitted = Column(Boolean, default=False, nullable=False)
    is_predefined = Column(Boolean, default=False, nullable=False)
    ask_for_plus_one = Column(Boolean, default=True, nullable=False)
    ask_for_kids = Column(Boolean, default=False, nullable=False)
    max_number_of_kids = Column(Integer, default=0, nullable=False)
    ask_for_accommodation = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    last_modified = Column(DateTime, default=_now, onupdate=_now, nullable=False)

    @property
    def is_group(self) -> bool:
        return bool(self.guests)

    @property
    def party_size(self) -> int:
        """Return the number of adults covered by this record."""
        if self.is_group:
            return len(self.guests)
        return 1 + (1 if self.plus_one else 0)


class AdminSession(Base):
    __tablename__ = "admin_sessions"

    token = Column(String(64), primary_key=True)
    expires_at = Column(BigInteger, nullable=False, index=True)
    created_at = Column(DateTime, default=_now, nullable=False)
