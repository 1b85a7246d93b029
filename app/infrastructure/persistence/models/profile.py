"""Profile ORM model: platform user (vendor, client, driver, staff)."""

from sqlalchemy import Enum as SAEnum
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import UserStatus, UserType
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


class Profile(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """User profile. Table: profiles. Soft-deleted rows keep their audit trail."""

    __tablename__ = "profiles"

    name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
    image: Mapped[str | None] = mapped_column(String, nullable=True)
    type: Mapped[str] = mapped_column(
        SAEnum(
            *[t.value for t in UserType],
            name="user_type",
            native_enum=False,
            length=20,
        ),
        nullable=False,
        default=UserType.CLIENT.value,
    )
    status: Mapped[str] = mapped_column(
        SAEnum(
            *[s.value for s in UserStatus],
            name="user_status",
            native_enum=False,
            length=20,
        ),
        nullable=False,
        default=UserStatus.PENDING.value,
    )
    contact_name: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String, nullable=True)
    company_name: Mapped[str | None] = mapped_column(String, nullable=True)
    website: Mapped[str | None] = mapped_column(String, nullable=True)
    street1: Mapped[str | None] = mapped_column(String, nullable=True)
    street2: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    zip: Mapped[str | None] = mapped_column(String, nullable=True)
