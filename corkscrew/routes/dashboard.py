"""Dashboard route."""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel

from ..database import (
    Backend,
    get_profile,
    list_applications_for_jobs,
    list_applications_for_worker,
    list_jobs_for_client,
    list_open_jobs,
)
from ..errors import ProfileNotFoundError
from ..models import Job, JobApplication, Profile
from ..pages import Page, build_layout
from ..session import ConfiguredSettings, CurrentSession

router = APIRouter(tags=["dashboard"])

RECOMMENDED_JOBS_LIMIT = 10


class DashboardStat(BaseModel):
    label: str
    value: int


class DashboardPage(Page):
    view: Literal["hire", "work"]
    profile: Profile
    stats: list[DashboardStat]
    jobs: list[Job]
    applications: list[JobApplication]


async def load_dashboard_data(db, user_id: str) -> tuple[Profile, list[Job], list[JobApplication]]:
    """Load the viewer's profile plus the jobs and applications for their role.

    Hire profiles get their own postings and every application to them.
    Work profiles get their own applications and the next open jobs.
    """
    profile_row = await get_profile(db, user_id)
    if not profile_row:
        raise ProfileNotFoundError(f"Profile not found for {user_id}")
    profile = Profile.model_validate(profile_row)

    if profile.role == "hire":
        jobs = await list_jobs_for_client(db, user_id)
        applications = await list_applications_for_jobs(db, [job["id"] for job in jobs])
    else:
        applications = await list_applications_for_worker(db, user_id)
        jobs = await list_open_jobs(db, limit=RECOMMENDED_JOBS_LIMIT)

    return (
        profile,
        [Job.model_validate(job) for job in jobs],
        [JobApplication.model_validate(a) for a in applications],
    )


def dashboard_stats(role: str, jobs: list[Job], applications: list[JobApplication]) -> list[DashboardStat]:
    if role == "hire":
        return [
            DashboardStat(label="Open roles", value=sum(1 for j in jobs if j.status == "open")),
            DashboardStat(label="Applications received", value=len(applications)),
            DashboardStat(label="Events posted", value=len(jobs)),
        ]
    return [
        DashboardStat(label="Total applications", value=len(applications)),
        DashboardStat(
            label="Upcoming gigs", value=sum(1 for a in applications if a.status == "accepted")
        ),
        DashboardStat(label="Open roles nearby", value=len(jobs)),
    ]


@router.get("/dashboard", response_model=DashboardPage)
async def dashboard_page(settings: ConfiguredSettings, session: CurrentSession, db: Backend):
    profile, jobs, applications = await load_dashboard_data(db, session.user_id)
    return DashboardPage(
        layout=build_layout(session),
        view=profile.role,
        profile=profile,
        stats=dashboard_stats(profile.role, jobs, applications),
        jobs=jobs,
        applications=applications,
    )
