"""User audit ORM model. Append-only change log for profile records."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Connection,
    DateTime,
    ForeignKey,
    Identity,
    Index,
    String,
    Text,
    event,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from app.infrastructure.persistence.database import Base
from app.shared.utils.generators import generate_cuid

# JSONB on PostgreSQL; plain JSON elsewhere.
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


class UserAudit(Base):
    """One audited change to a user: who, when, what changed, why. No update/delete."""

    __tablename__ = "user_audits"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    # Insertion order; breaks created_at ties (entries in one transaction share now()).
    seq: Mapped[int] = mapped_column(
        BigInteger, Identity(always=True), nullable=False, unique=True
    )
    # No ON DELETE action: a profile with audit history can only be soft-deleted.
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("profiles.id"), nullable=False, index=True
    )
    action: Mapped[str] = mapped_column(String, nullable=False)
    # JSON null (not SQL NULL) when no field-level comparison applies.
    changes: Mapped[dict[str, Any] | None] = mapped_column(JsonDocument, nullable=True)
    # Actor id as sent upstream; not a foreign key, so entries outlive the actor.
    performed_by: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    audit_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JsonDocument, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    __table_args__ = (
        Index("ix_user_audits_user_created", "user_id", "created_at"),
        Index("ix_user_audits_user_action", "user_id", "action"),
    )


@event.listens_for(UserAudit, "before_update")
def _prevent_user_audit_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: UserAudit
) -> None:
    """Audit entries are append-only; updates are forbidden."""
    raise ValueError("User audit entries are immutable and cannot be updated.")


@event.listens_for(UserAudit, "before_delete")
def _prevent_user_audit_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: UserAudit
) -> None:
    """Audit entries cannot be deleted through the ORM."""
    raise ValueError("User audit entries cannot be deleted.")
