from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AdminBase(SQLModel):
    name: str
    email: str = Field(unique=True, index=True)
    notification_email: str
    unique_link_slug: str = Field(unique=True, index=True)


class Admin(AdminBase, table=True):
    __tablename__ = "admins"
    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    # sha256 of the emailed token; the raw token is never stored
    password_reset_token: str | None = Field(default=None, index=True)
    password_reset_expires: datetime | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AdminCreate(SQLModel):
    name: str
    email: str
    password: str
    notification_email: str
    unique_link_slug: str


class AdminUpdate(SQLModel):
    name: str | None = None
    notification_email: str | None = None
    unique_link_slug: str | None = None


class AdminPublic(AdminBase):
    id: int
