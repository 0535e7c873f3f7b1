"""Pydantic models for backend records and shared request bodies."""

from datetime import date, datetime, time
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

RoleType = Literal["hire", "work"]
JobStatus = Literal["open", "booked", "completed", "cancelled"]
ApplicationStatus = Literal["applied", "accepted", "declined"]


def _date_part(value: Any) -> Any:
    # timestamptz columns come back as full ISO strings
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def split_list(value: str | None) -> list[str] | None:
    """Split a comma separated form value, dropping empty items."""
    if not value:
        return None
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item] or None


# =============================================================================
# Records
# =============================================================================

class Profile(BaseModel):
    """A user's marketplace-facing identity."""

    model_config = ConfigDict(extra="ignore")

    id: str
    role: RoleType
    full_name: str | None = None
    bio: str | None = None
    skills: list[str] | None = None
    hourly_rate: float | None = None
    location: str | None = None
    avatar_url: str | None = None
    experience_years: int | None = None
    certifications: list[str] | None = None
    availability: Any = None
    created_at: datetime | None = None


class Job(BaseModel):
    """An event-staffing opportunity."""

    model_config = ConfigDict(extra="ignore")

    id: str
    client_id: str
    title: str
    description: str
    event_date: date
    start_time: time | None = None
    end_time: time | None = None
    location: str
    rate: float | None = None
    status: JobStatus = "open"
    created_at: datetime | None = None

    normalize_event_date = field_validator("event_date", mode="before")(_date_part)


class JobSummary(BaseModel):
    """The slice of a job the messages page needs."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    event_date: date
    location: str
    client_id: str

    normalize_event_date = field_validator("event_date", mode="before")(_date_part)


class JobApplication(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    job_id: str
    worker_id: str
    cover_letter: str | None = None
    status: ApplicationStatus = "applied"
    created_at: datetime | None = None


class Message(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    job_id: str
    sender_id: str
    recipient_id: str
    content: str
    created_at: datetime


class Review(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    job_id: str
    reviewer_id: str
    reviewee_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = None
    created_at: datetime | None = None


# =============================================================================
# Auth Models
# =============================================================================

class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignUpRequest(BaseModel):
    full_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    confirm_password: str = Field(..., min_length=6)
    role: RoleType
    terms: bool

    @field_validator("terms")
    @classmethod
    def terms_must_be_accepted(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must accept the terms")
        return v

    @model_validator(mode="after")
    def passwords_must_match(self) -> "SignUpRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords must match")
        return self


class CallbackSession(BaseModel):
    """Token pair forwarded by the session bridge.

    The backend's session object carries more (user, expiry); only the tokens
    matter here.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str


class AuthCallbackPayload(BaseModel):
    event: str
    session: CallbackSession | None = None


# =============================================================================
# Form Models
# =============================================================================

class ProfileUpdate(BaseModel):
    """Profile form submission. List fields arrive comma separated."""

    full_name: str = Field(..., min_length=2)
    role: RoleType
    bio: str | None = Field(None, max_length=600)
    skills: str | None = None
    hourly_rate: float | None = Field(None, ge=0)
    location: str | None = None
    experience_years: int | None = Field(None, ge=0)
    certifications: str | None = None

    blanks_to_none = field_validator(
        "bio", "skills", "hourly_rate", "location", "experience_years", "certifications",
        mode="before",
    )(_blank_to_none)

    def to_row(self, user_id: str) -> dict:
        return {
            "id": user_id,
            "full_name": self.full_name,
            "role": self.role,
            "bio": self.bio,
            "skills": split_list(self.skills),
            "hourly_rate": self.hourly_rate,
            "location": self.location,
            "experience_years": self.experience_years,
            "certifications": split_list(self.certifications),
        }


class JobCreate(BaseModel):
    """Request to publish a job."""

    title: str = Field(..., min_length=4)
    description: str = Field(..., min_length=40)
    event_date: date
    start_time: time | None = None
    end_time: time | None = None
    location: str = Field(..., min_length=2)
    rate: float | None = Field(None, ge=0)

    blanks_to_none = field_validator("start_time", "end_time", "rate", mode="before")(_blank_to_none)


class ApplicationCreate(BaseModel):
    cover_letter: str = Field(..., min_length=20, max_length=1200)


class MessageCreate(BaseModel):
    job_id: str
    recipient_id: str | None = None
    content: str = Field(..., min_length=1, max_length=1000)


class FormError(BaseModel):
    """Inline error returned when the backend rejects a form submission."""

    error: str
