"""
Account service: SQLAlchemy ORM model for the credential store.

Tables owned by this module:
  - accounts   Username/password credentials, email verification and reset state

Token columns use the empty string for "nothing pending":
  - email_verify_token is non-empty only while email_verified is False
  - reset_token is non-empty only between a reset request and its completion
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from shared.database.postgres import Base


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        sa.CheckConstraint(
            "NOT email_verified OR email_verify_token = ''",
            name="ck_accounts_verified_has_no_verify_token",
        ),
    )

    # ── Primary key ──────────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(),
        primary_key=True,
        default=uuid.uuid4,
    )

    # ── Credentials ───────────────────────────────────────────────────────────
    # Stable identity key; uniqueness is what makes create_user atomic
    username: Mapped[str] = mapped_column(
        sa.String(100), unique=True, nullable=False, index=True
    )
    # Self-describing argon2 digest ($argon2id$v=19$m=...,t=...,p=...$salt$hash)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)

    # ── Email verification ────────────────────────────────────────────────────
    email: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    email_verified: Mapped[bool] = mapped_column(
        sa.Boolean(),
        nullable=False,
        default=False,
        server_default=sa.false(),
    )
    email_verify_token: Mapped[str] = mapped_column(
        sa.String(64),
        nullable=False,
        default="",
        server_default="",
    )

    # ── Password reset ────────────────────────────────────────────────────────
    reset_token: Mapped[str] = mapped_column(
        sa.String(64),
        nullable=False,
        default="",
        server_default="",
    )

    # ── Audit timestamps ──────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"Account(username={self.username!r}, email={self.email!r}, "
            f"email_verified={self.email_verified!r})"
        )
