import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from taskdeck.models.base import Base, utcnow
from taskdeck.models.enums import Plan, SubscriptionStatus

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(sa.String(320), unique=True, index=True, nullable=False)
    name: Mapped[str | None] = mapped_column(sa.String(200), nullable=True)

    # never serialized; deferred when resolving bearer tokens
    password_hash: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)

    plan: Mapped[Plan] = mapped_column(
        sa.Enum(Plan, name="plan"), nullable=False, default=Plan.free, server_default="free"
    )
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        sa.Enum(SubscriptionStatus, name="subscription_status"),
        nullable=False,
        default=SubscriptionStatus.none,
        server_default="none",
    )
    current_period_end: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    stripe_customer_id: Mapped[str | None] = mapped_column(sa.String(255), nullable=True, index=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now(), nullable=False
    )
    last_login: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
