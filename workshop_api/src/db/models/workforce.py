from __future__ import annotations

from typing import Optional
from sqlalchemy import Text, Integer
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class Worker(IntPkMixin, TimestampMixin, Base):
    """Technician with cumulative workload counters maintained by the work-order engine."""
    __tablename__ = "workers"

    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_jobs: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_services: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
