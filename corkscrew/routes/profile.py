"""Profile routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from ..database import Backend, get_profile, upsert_profile
from ..errors import RecordAccessError
from ..logging_config import get_logger
from ..models import Profile, ProfileUpdate
from ..pages import FORM_ERROR_RESPONSES, Page, build_layout, form_error
from ..session import ConfiguredSettings, CurrentSession

logger = get_logger("corkscrew.profile")
router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileFormValues(BaseModel):
    full_name: str = ""
    role: str = "hire"
    bio: str = ""
    skills: str = ""
    hourly_rate: str = ""
    location: str = ""
    experience_years: str = ""
    certifications: str = ""


class ProfilePage(Page):
    profile: Profile | None = None
    form: ProfileFormValues


class ProfileSaved(BaseModel):
    message: str = "Profile updated successfully."


def form_values(profile: Profile | None) -> ProfileFormValues:
    """Pre-fill the profile form. List fields are shown comma separated."""
    if profile is None:
        return ProfileFormValues()
    return ProfileFormValues(
        full_name=profile.full_name or "",
        role=profile.role,
        bio=profile.bio or "",
        skills=", ".join(profile.skills or []),
        hourly_rate="" if profile.hourly_rate is None else f"{profile.hourly_rate:g}",
        location=profile.location or "",
        experience_years="" if profile.experience_years is None else str(profile.experience_years),
        certifications=", ".join(profile.certifications or []),
    )


@router.get("", response_model=ProfilePage)
async def profile_page(settings: ConfiguredSettings, session: CurrentSession, db: Backend):
    row = await get_profile(db, session.user_id)
    profile = Profile.model_validate(row) if row else None
    return ProfilePage(layout=build_layout(session), profile=profile, form=form_values(profile))


@router.post("", response_model=ProfileSaved, responses=FORM_ERROR_RESPONSES)
async def save_profile(
    form: ProfileUpdate,
    settings: ConfiguredSettings,
    session: CurrentSession,
    db: Backend,
):
    try:
        await upsert_profile(db, form.to_row(session.user_id))
    except RecordAccessError as e:
        return form_error(e.message)
    logger.info(f"Profile saved | user={session.user_id} | role={form.role}")
    return ProfileSaved()
