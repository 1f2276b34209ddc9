"""init schema

Revision ID: 0001_init
Revises: 
Create Date: 2026-09-28
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    # enums
    plan_create = postgresql.ENUM("free", "pro", "enterprise", name="plan")
    subscription_status_create = postgresql.ENUM(
        "none",
        "incomplete",
        "trialing",
        "active",
        "past_due",
        "canceled",
        "unpaid",
        name="subscription_status",
    )
    task_status_create = postgresql.ENUM("open", "in_progress", "completed", name="task_status")
    task_priority_create = postgresql.ENUM("low", "medium", "high", "urgent", name="task_priority")

    plan_create.create(op.get_bind(), checkfirst=True)
    subscription_status_create.create(op.get_bind(), checkfirst=True)
    task_status_create.create(op.get_bind(), checkfirst=True)
    task_priority_create.create(op.get_bind(), checkfirst=True)

    plan = postgresql.ENUM("free", "pro", "enterprise", name="plan", create_type=False)
    subscription_status = postgresql.ENUM(
        "none",
        "incomplete",
        "trialing",
        "active",
        "past_due",
        "canceled",
        "unpaid",
        name="subscription_status",
        create_type=False,
    )
    task_status = postgresql.ENUM("open", "in_progress", "completed", name="task_status", create_type=False)
    task_priority = postgresql.ENUM("low", "medium", "high", "urgent", name="task_priority", create_type=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("plan", plan, nullable=False, server_default="free"),
        sa.Column("subscription_status", subscription_status, nullable=False, server_default="none"),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", task_status, nullable=False, server_default="open"),
        sa.Column("priority", task_priority, nullable=False, server_default="medium"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_tasks_user_id", "tasks", ["user_id"])
    op.create_index("ix_tasks_user_id_status", "tasks", ["user_id", "status"])

    op.create_table(
        "auth_magic_links",
        sa.Column("token_hash", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_auth_magic_links_user_id", "auth_magic_links", ["user_id"])

def downgrade() -> None:
    op.drop_index("ix_auth_magic_links_user_id", table_name="auth_magic_links")
    op.drop_table("auth_magic_links")

    op.drop_index("ix_tasks_user_id_status", table_name="tasks")
    op.drop_index("ix_tasks_user_id", table_name="tasks")
    op.drop_table("tasks")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    postgresql.ENUM(name="task_priority").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="task_status").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="subscription_status").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="plan").drop(op.get_bind(), checkfirst=True)
