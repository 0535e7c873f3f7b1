"""Job marketplace routes: browse, post, view and apply."""

import asyncio
from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from ..database import (
    Backend,
    create_application,
    create_job,
    get_job,
    get_profile,
    list_applications_for_job,
    list_open_jobs,
)
from ..errors import RecordAccessError
from ..logging_config import get_logger
from ..models import ApplicationCreate, Job, JobApplication, JobCreate, Profile
from ..pages import FORM_ERROR_RESPONSES, Page, build_layout, form_error
from ..session import ConfiguredSettings, CurrentSession, OptionalSession

logger = get_logger("corkscrew.jobs")
router = APIRouter(prefix="/jobs", tags=["jobs"])

ApplyPanel = Literal["form", "confirmation", "sign_in", "switch_role"]


# =============================================================================
# Page Models
# =============================================================================

class JobFilters(BaseModel):
    q: str | None = None
    location: str | None = None
    role: str | None = None
    date: str | None = None


class JobsPage(Page):
    filters: JobFilters
    jobs: list[Job]
    can_post_job: bool = False


class NewJobPage(Page):
    fields: list[str]


class JobDetailPage(Page):
    job: Job
    client_profile: Profile | None = None
    viewer_role: str | None = None
    is_owner: bool = False
    applications: list[JobApplication] = []
    has_applied: bool = False
    apply_panel: ApplyPanel


class ApplicationResult(BaseModel):
    state: Literal["application_sent"] = "application_sent"
    application: JobApplication | None = None


def apply_panel_for(viewer: Profile | None, has_applied: bool) -> ApplyPanel:
    """Which apply panel the job page shows.

    Workers who already applied only ever see the confirmation.
    """
    if viewer is None:
        return "sign_in"
    if viewer.role != "work":
        return "switch_role"
    if has_applied:
        return "confirmation"
    return "form"


async def _maybe_profile(db, user_id: str | None) -> dict | None:
    if not user_id:
        return None
    return await get_profile(db, user_id)


# =============================================================================
# Routes
# =============================================================================

@router.get("", response_model=JobsPage)
async def jobs_page(
    settings: ConfiguredSettings,
    session: OptionalSession,
    db: Backend,
    q: str | None = Query(None),
    location: str | None = Query(None),
    role: str | None = Query(None),
    date: str | None = Query(None),
):
    """
    Browse open jobs.

    Filters:
    - q: keyword in the title
    - location: city or neighborhood
    - role: skill or role mentioned in the description
    - date: earliest event date (YYYY-MM-DD)
    """
    filters = JobFilters(q=q or None, location=location or None, role=role or None, date=date or None)
    jobs, profile = await asyncio.gather(
        list_open_jobs(db, query=filters.q, location=filters.location, role=filters.role, date=filters.date),
        _maybe_profile(db, session.user_id if session else None),
    )
    return JobsPage(
        layout=build_layout(session),
        filters=filters,
        jobs=[Job.model_validate(job) for job in jobs],
        can_post_job=bool(profile and profile.get("role") == "hire"),
    )


@router.get("/new", response_model=NewJobPage)
async def new_job_page(settings: ConfiguredSettings, session: CurrentSession, db: Backend):
    """Job posting form. Only hire profiles may post."""
    profile = await get_profile(db, session.user_id)
    if not profile or profile.get("role") != "hire":
        return RedirectResponse(url="/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    return NewJobPage(
        layout=build_layout(session),
        fields=["title", "description", "event_date", "start_time", "end_time", "location", "rate"],
    )


@router.post("", responses=FORM_ERROR_RESPONSES)
async def create_job_listing(
    job: JobCreate,
    settings: ConfiguredSettings,
    session: CurrentSession,
    db: Backend,
):
    """
    Publish a job.

    The signed-in user becomes the client. Jobs start open; on success the
    browser is sent to the new job's page.
    """
    logger.info(f"POST /jobs | client={session.user_id} | title={job.title[:50]}")
    fields = {
        "client_id": session.user_id,
        "title": job.title,
        "description": job.description,
        "event_date": job.event_date.isoformat(),
        "start_time": job.start_time.isoformat() if job.start_time else None,
        "end_time": job.end_time.isoformat() if job.end_time else None,
        "location": job.location,
        "rate": job.rate,
    }
    try:
        created = await create_job(db, fields)
    except RecordAccessError as e:
        return form_error(e.message)

    logger.info(f"Job created | id={created['id']} | client={session.user_id}")
    return RedirectResponse(url=f"/jobs/{created['id']}", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{job_id}", response_model=JobDetailPage)
async def job_detail_page(
    job_id: str,
    settings: ConfiguredSettings,
    session: OptionalSession,
    db: Backend,
):
    """Job details, the host's profile, and the viewer's apply panel."""
    job_row = await get_job(db, job_id)
    if not job_row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    job = Job.model_validate(job_row)

    client_row, viewer_row = await asyncio.gather(
        get_profile(db, job.client_id),
        _maybe_profile(db, session.user_id if session else None),
    )
    viewer = Profile.model_validate(viewer_row) if viewer_row else None

    applications: list[JobApplication] = []
    has_applied = False
    if session:
        rows = await list_applications_for_job(db, job_id)
        applications = [JobApplication.model_validate(row) for row in rows]
        has_applied = any(a.worker_id == session.user_id for a in applications)

    is_owner = viewer is not None and viewer.id == job.client_id
    return JobDetailPage(
        layout=build_layout(session),
        job=job,
        client_profile=Profile.model_validate(client_row) if client_row else None,
        viewer_role=viewer.role if viewer else None,
        is_owner=is_owner,
        applications=applications if is_owner else [],
        has_applied=has_applied,
        apply_panel=apply_panel_for(viewer, has_applied),
    )


@router.post("/{job_id}/apply", response_model=ApplicationResult, responses=FORM_ERROR_RESPONSES)
async def apply_to_job(
    job_id: str,
    form: ApplicationCreate,
    settings: ConfiguredSettings,
    session: CurrentSession,
    db: Backend,
):
    """
    Apply to a job as a worker.

    Applying twice is not an error: the second submission just returns the
    confirmation state without writing anything.
    """
    job = await get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")

    profile = await get_profile(db, session.user_id)
    if not profile or profile.get("role") != "work":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Switch to your worker account to apply for this role",
        )

    existing = await list_applications_for_job(db, job_id)
    if any(row.get("worker_id") == session.user_id for row in existing):
        return ApplicationResult()

    try:
        created = await create_application(db, job_id, session.user_id, form.cover_letter)
    except RecordAccessError as e:
        return form_error(e.message)

    logger.info(f"Application created | job={job_id} | worker={session.user_id}")
    return ApplicationResult(application=JobApplication.model_validate(created))
