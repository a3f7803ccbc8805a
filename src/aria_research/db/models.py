"""SQLAlchemy ORM models for the simulation archive."""

from datetime import datetime

from sqlalchemy import ARRAY, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SimulationORM(Base):
    __tablename__ = "simulations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    simulation_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    decision: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(String(20)))
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_simulations_created", created_at.desc()),)
