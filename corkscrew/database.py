"""Record access layer over Supabase.

Every page and form reads and writes through the functions here. The
functions take the backend client as their first argument so callers decide
whose session the queries run under. The blocking supabase calls run in a
worker thread, so independent reads awaited together do overlap.
"""

import asyncio
import re
from typing import Annotated, Any

from fastapi import Depends
from supabase import Client, ClientOptions, PostgrestAPIError, create_client

from .config import Settings, get_settings
from .errors import RecordAccessError, SetupRequired
from .logging_config import get_logger

logger = get_logger("corkscrew.database")

_supabase_client: Client | None = None


def get_supabase_client(settings: Settings | None = None) -> Client:
    """Get the process-wide Supabase client, building it on first use.

    This instance owns a persisted, auto-refreshing session slot and is the
    one the session bridge listens to.
    """
    global _supabase_client
    if _supabase_client is None:
        if settings is None:
            settings = get_settings()
        if not settings.backend_configured:
            raise SetupRequired()
        _supabase_client = create_client(settings.supabase_url, settings.supabase_key)
    return _supabase_client


def create_request_client(settings: Settings) -> Client:
    """Build a client scoped to one request.

    No session is persisted and nothing refreshes in the background; the
    session store attaches the cookie session explicitly.
    """
    options = ClientOptions(persist_session=False, auto_refresh_token=False)
    return create_client(settings.supabase_url, settings.supabase_key, options=options)


def get_backend(settings: Annotated[Settings, Depends(get_settings)]) -> Client:
    """FastAPI dependency for a request-scoped Supabase client."""
    if not settings.backend_configured:
        raise SetupRequired()
    return create_request_client(settings)


# Type alias for dependency injection
Backend = Annotated[Client, Depends(get_backend)]


def escape_like(query: str) -> str:
    """Escape LIKE special characters in user-supplied filter text."""
    # Escape backslash first, then %, then _
    return re.sub(r"([%_\\])", r"\\\1", query)


# =============================================================================
# Table Names
# =============================================================================

PROFILES_TABLE = "profiles"
JOBS_TABLE = "jobs"
JOB_APPLICATIONS_TABLE = "job_applications"
MESSAGES_TABLE = "messages"
REVIEWS_TABLE = "reviews"

JOB_SUMMARY_COLUMNS = "id, title, event_date, location, client_id"


# =============================================================================
# Generic Operations
# =============================================================================

async def query_records(
    db: Client,
    table: str,
    *,
    columns: str = "*",
    filters: dict[str, Any] | None = None,
    order_by: str | None = None,
    desc: bool = False,
    limit: int | None = None,
) -> list[dict]:
    """Select rows matching equality filters, optionally ordered and limited."""
    query = db.table(table).select(columns)
    for column, value in (filters or {}).items():
        query = query.eq(column, value)
    if order_by:
        query = query.order(order_by, desc=desc)
    if limit:
        query = query.limit(limit)
    result = await asyncio.to_thread(query.execute)
    return result.data or []


async def insert_record(db: Client, table: str, fields: dict) -> dict:
    """Insert a row and return it as created."""
    try:
        result = await asyncio.to_thread(db.table(table).insert(fields).execute)
    except PostgrestAPIError as e:
        logger.warning(f"Insert into {table} rejected: {e.message}")
        raise RecordAccessError(e.message or "Could not save changes") from e
    if not result.data:
        raise RecordAccessError("Could not save changes")
    return result.data[0]


async def upsert_record(db: Client, table: str, fields: dict, on_conflict: str = "id") -> None:
    """Insert or update a row keyed on ``on_conflict``."""
    try:
        await asyncio.to_thread(db.table(table).upsert(fields, on_conflict=on_conflict).execute)
    except PostgrestAPIError as e:
        logger.warning(f"Upsert into {table} rejected: {e.message}")
        raise RecordAccessError(e.message or "Could not save changes") from e


# =============================================================================
# Profile Operations
# =============================================================================

async def get_profile(db: Client, user_id: str) -> dict | None:
    """Get a profile by user id."""
    rows = await query_records(db, PROFILES_TABLE, filters={"id": user_id}, limit=1)
    return rows[0] if rows else None


async def upsert_profile(db: Client, fields: dict) -> None:
    await upsert_record(db, PROFILES_TABLE, fields)


# =============================================================================
# Job Operations
# =============================================================================

async def get_job(db: Client, job_id: str) -> dict | None:
    """Get a job by ID."""
    rows = await query_records(db, JOBS_TABLE, filters={"id": job_id}, limit=1)
    return rows[0] if rows else None


async def list_open_jobs(
    db: Client,
    query: str | None = None,
    location: str | None = None,
    role: str | None = None,
    date: str | None = None,
    limit: int | None = None,
) -> list[dict]:
    """List open jobs by ascending event date.

    Text filters are case-insensitive substring matches: ``query`` on the
    title, ``location`` on the location and ``role`` on the description.
    ``date`` is the earliest event date to include.
    """
    request = db.table(JOBS_TABLE).select("*").eq("status", "open")
    if query:
        request = request.ilike("title", f"%{escape_like(query)}%")
    if location:
        request = request.ilike("location", f"%{escape_like(location)}%")
    if role:
        request = request.ilike("description", f"%{escape_like(role)}%")
    if date:
        request = request.gte("event_date", date)
    request = request.order("event_date", desc=False)
    if limit:
        request = request.limit(limit)

    try:
        result = await asyncio.to_thread(request.execute)
    except PostgrestAPIError as e:
        logger.warning(f"Job search failed: {e.message}")
        return []
    return result.data or []


async def list_featured_jobs(db: Client, limit: int = 3) -> list[dict]:
    """Newest open jobs for the landing page."""
    try:
        return await query_records(
            db, JOBS_TABLE, filters={"status": "open"}, order_by="created_at", desc=True, limit=limit
        )
    except PostgrestAPIError as e:
        logger.warning(f"Featured jobs query failed: {e.message}")
        return []


async def list_jobs_for_client(db: Client, client_id: str) -> list[dict]:
    return await query_records(
        db, JOBS_TABLE, filters={"client_id": client_id}, order_by="created_at", desc=True
    )


async def get_job_summaries(db: Client, job_ids: list[str]) -> list[dict]:
    """Fetch the summary columns for a set of jobs."""
    if not job_ids:
        return []
    query = db.table(JOBS_TABLE).select(JOB_SUMMARY_COLUMNS).in_("id", job_ids)
    result = await asyncio.to_thread(query.execute)
    return result.data or []


async def create_job(db: Client, fields: dict) -> dict:
    """Create a job listing. New jobs always start open."""
    return await insert_record(db, JOBS_TABLE, {**fields, "status": "open"})


# =============================================================================
# Application Operations
# =============================================================================

async def list_applications_for_job(db: Client, job_id: str) -> list[dict]:
    return await query_records(db, JOB_APPLICATIONS_TABLE, filters={"job_id": job_id})


async def list_applications_for_jobs(db: Client, job_ids: list[str]) -> list[dict]:
    if not job_ids:
        return []
    query = db.table(JOB_APPLICATIONS_TABLE).select("*").in_("job_id", job_ids)
    result = await asyncio.to_thread(query.execute)
    return result.data or []


async def list_applications_for_worker(db: Client, worker_id: str) -> list[dict]:
    return await query_records(
        db,
        JOB_APPLICATIONS_TABLE,
        filters={"worker_id": worker_id},
        order_by="created_at",
        desc=True,
    )


async def create_application(
    db: Client, job_id: str, worker_id: str, cover_letter: str | None
) -> dict:
    return await insert_record(
        db,
        JOB_APPLICATIONS_TABLE,
        {"job_id": job_id, "worker_id": worker_id, "cover_letter": cover_letter},
    )


# =============================================================================
# Message Operations
# =============================================================================

async def list_messages_for_user(db: Client, user_id: str) -> list[dict]:
    """Messages the user sent or received, oldest first."""
    query = (
        db.table(MESSAGES_TABLE)
        .select("*")
        .or_(f"sender_id.eq.{user_id},recipient_id.eq.{user_id}")
        .order("created_at", desc=False)
    )
    result = await asyncio.to_thread(query.execute)
    return result.data or []


async def create_message(
    db: Client, job_id: str, sender_id: str, recipient_id: str, content: str
) -> dict:
    return await insert_record(
        db,
        MESSAGES_TABLE,
        {
            "job_id": job_id,
            "sender_id": sender_id,
            "recipient_id": recipient_id,
            "content": content,
        },
    )


# =============================================================================
# Review Operations
# =============================================================================

async def create_review(
    db: Client,
    job_id: str,
    reviewer_id: str,
    reviewee_id: str,
    rating: int,
    comment: str | None = None,
) -> dict:
    return await insert_record(
        db,
        REVIEWS_TABLE,
        {
            "job_id": job_id,
            "reviewer_id": reviewer_id,
            "reviewee_id": reviewee_id,
            "rating": rating,
            "comment": comment,
        },
    )


async def list_reviews_for_user(db: Client, reviewee_id: str) -> list[dict]:
    """Reviews written about a user, newest first."""
    return await query_records(
        db, REVIEWS_TABLE, filters={"reviewee_id": reviewee_id}, order_by="created_at", desc=True
    )
