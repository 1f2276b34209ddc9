import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from taskdeck.models.base import Base, utcnow

class WebhookEvent(Base):
    __tablename__ = "webhook_events"
    __table_args__ = (sa.UniqueConstraint("provider", "event_id", name="uq_webhook_events_provider_event_id"),)

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)

    provider: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    event_id: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    event_type: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)

    received_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sa.func.now(),
    )
    processed_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    # received | processed | ignored | failed
    status: Mapped[str] = mapped_column(sa.String(16), nullable=False, default="received", server_default="received")
    error: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)

    payload: Mapped[dict | None] = mapped_column(sa.JSON, nullable=True)
