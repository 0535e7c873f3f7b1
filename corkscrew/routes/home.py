"""Landing and setup pages."""

from fastapi import APIRouter

from ..database import Backend, list_featured_jobs
from ..models import Job
from ..pages import Page, build_layout
from ..session import ConfiguredSettings, OptionalSession

router = APIRouter(tags=["pages"])

FEATURED_JOBS_LIMIT = 3


class HomePage(Page):
    featured_jobs: list[Job]


class SetupPage(Page):
    required_variables: list[str]
    steps: list[str]


@router.get("/", response_model=HomePage)
async def home_page(settings: ConfiguredSettings, session: OptionalSession, db: Backend):
    jobs = await list_featured_jobs(db, limit=FEATURED_JOBS_LIMIT)
    return HomePage(
        layout=build_layout(session),
        featured_jobs=[Job.model_validate(job) for job in jobs],
    )


@router.get("/setup", response_model=SetupPage)
async def setup_page():
    """How to connect a Supabase project. Reachable without any configuration."""
    return SetupPage(
        layout=build_layout(None),
        required_variables=["SUPABASE_URL", "SUPABASE_PUBLISHABLE_KEY"],
        steps=[
            "Copy the project URL and publishable (anon) key from the Supabase dashboard.",
            "Set SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY (or the legacy SUPABASE_ANON_KEY) "
            "in the environment or a .env file.",
            "Restart the server so the new settings are loaded.",
        ],
    )
