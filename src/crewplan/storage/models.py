from datetime import date, datetime
from typing import Optional
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import (
    String, Boolean, Float, Text, Date, DateTime, ForeignKey,
    Index, UniqueConstraint, CheckConstraint, func
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

class Base(DeclarativeBase):
    pass

# Postgres TIMESTAMPTZ, generic DateTime elsewhere (SQLite tests)
TIMESTAMP_TYPE = DateTime(timezone=True).with_variant(TIMESTAMP(timezone=True), 'postgresql')

# --- Employees ---

class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String, nullable=False)
    full_name: Mapped[str] = mapped_column(String, nullable=False)
    weekly_hours: Mapped[float] = mapped_column(Float, server_default='40')
    is_active: Mapped[bool] = mapped_column(Boolean, server_default='1')
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

    __table_args__ = (
        UniqueConstraint('tenant_id', 'email', name='uq_users_tenant_email'),
    )

# --- Equipment ---

class ResourceModel(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, server_default='1')
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now())

# --- Project Phases ---

class ProjectPhaseModel(Base):
    __tablename__ = "project_phases"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, server_default=func.now(), onupdate=func.now())

# --- Allocations ---

class AllocationModel(Base):
    __tablename__ = "allocations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id"), index=True)
    resource_id: Mapped[Optional[str]] = mapped_column(ForeignKey("resources.id"), index=True)
    project_phase_id: Mapped[str] = mapped_column(ForeignKey("project_phases.id"), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    planned_hours: Mapped[Optional[float]] = mapped_column(Float)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, nullable=False)

    __table_args__ = (
        CheckConstraint(
            '(user_id IS NULL) <> (resource_id IS NULL)',
            name='ck_allocations_user_xor_resource',
        ),
        Index('ix_allocations_user_date', 'user_id', 'date'),
        Index('ix_allocations_tenant_date', 'tenant_id', 'date'),
    )

# --- Absences ---

class AbsenceModel(Base):
    __tablename__ = "absences"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, nullable=False)

    __table_args__ = (
        CheckConstraint('end_date >= start_date', name='ck_absences_date_range'),
        Index('ix_absences_user_range', 'user_id', 'start_date', 'end_date'),
    )

# --- Absence Conflicts ---

class AbsenceConflictModel(Base):
    """
    Conflict rows cascade with their absence. ``allocation_id`` has no
    storage cascade so a conflict resolved as 'deleted' keeps its row.
    """
    __tablename__ = "absence_conflicts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    allocation_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    absence_id: Mapped[str] = mapped_column(ForeignKey("absences.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    absence_type: Mapped[str] = mapped_column(String, nullable=False)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP_TYPE)
    resolved_by: Mapped[Optional[str]] = mapped_column(String)
    resolution: Mapped[Optional[str]] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP_TYPE, nullable=False)

    __table_args__ = (
        UniqueConstraint('allocation_id', 'absence_id', name='uq_absence_conflict_allocation_absence'),
    )
