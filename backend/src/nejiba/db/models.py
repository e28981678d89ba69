import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class SavedWorkshop(Base):
    __tablename__ = "saved_workshops"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    plan: Mapped[dict] = mapped_column(JsonDocument, nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)
    imported_from: Mapped[str | None] = mapped_column(String(20), nullable=True)
    topic: Mapped[str] = mapped_column(Text, default="")
    duration: Mapped[str] = mapped_column(String(100), default="")
    age_range: Mapped[str] = mapped_column(String(100), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
