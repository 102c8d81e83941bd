# backend/visit_sync/models/reference.py
"""
Reference and identity tables owned by the legacy system of record.

The visit core only reads these: prisons, persons, reference codes and the
service agency switches that hand a function over to another service.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Prison(Base):
    """An agency location that hosts visits."""

    __tablename__ = "agency_locations"

    id: Mapped[str] = mapped_column(String(6), primary_key=True)
    description: Mapped[str] = mapped_column(String(40), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Prison {self.id}>"


class Person(Base):
    """A visitor's identity record."""

    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(35), nullable=False)
    last_name: Mapped[str] = mapped_column(String(35), nullable=False)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ReferenceCode(Base):
    """A (domain, code) pair with its description and active flag."""

    __tablename__ = "reference_codes"

    domain: Mapped[str] = mapped_column(String(12), primary_key=True)
    code: Mapped[str] = mapped_column(String(12), primary_key=True)
    description: Mapped[str] = mapped_column(String(40), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<ReferenceCode {self.domain}/{self.code}>"


class ServiceAgencySwitch(Base):
    """Marks a prison where the named service has taken over a function."""

    __tablename__ = "service_agency_switches"

    service_code: Mapped[str] = mapped_column(String(30), primary_key=True)
    prison_id: Mapped[str] = mapped_column(String(6), primary_key=True)
