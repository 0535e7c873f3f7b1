"""Messaging routes."""

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from ..conversations import Conversation, group_conversations, resolve_counterpart, select_conversation
from ..database import Backend, create_message, get_job_summaries, list_messages_for_user
from ..errors import RecordAccessError
from ..logging_config import get_logger
from ..models import JobSummary, Message, MessageCreate
from ..pages import FORM_ERROR_RESPONSES, Page, build_layout, form_error
from ..session import ConfiguredSettings, CurrentSession

logger = get_logger("corkscrew.messages")
router = APIRouter(prefix="/messages", tags=["messages"])

NO_COUNTERPART_HINT = "Applicants need to reach out or apply before you can respond here."


class ConversationLink(BaseModel):
    job: JobSummary
    href: str
    active: bool = False


class ActiveConversation(BaseModel):
    job: JobSummary
    messages: list[Message]
    counterpart_id: str | None = None
    composer_enabled: bool = False
    hint: str | None = None


class MessagesPage(Page):
    empty: bool
    conversations: list[ConversationLink] = []
    active: ActiveConversation | None = None


async def fetch_conversations(db, user_id: str) -> list[Conversation]:
    """The viewer's message log grouped into one conversation per job."""
    rows = await list_messages_for_user(db, user_id)
    if not rows:
        return []
    messages = [Message.model_validate(row) for row in rows]

    job_ids = list(dict.fromkeys(m.job_id for m in messages))
    jobs = [JobSummary.model_validate(row) for row in await get_job_summaries(db, job_ids)]
    return group_conversations(messages, jobs)


def build_active(conversation: Conversation, viewer_id: str) -> ActiveConversation:
    counterpart_id = resolve_counterpart(conversation, viewer_id)
    hint = None
    if counterpart_id is None and viewer_id == conversation.job.client_id:
        hint = NO_COUNTERPART_HINT
    return ActiveConversation(
        job=conversation.job,
        messages=conversation.messages,
        counterpart_id=counterpart_id,
        composer_enabled=counterpart_id is not None,
        hint=hint,
    )


@router.get("", response_model=MessagesPage)
async def messages_page(
    settings: ConfiguredSettings,
    session: CurrentSession,
    db: Backend,
    job_id: str | None = Query(None, alias="jobId"),
):
    """
    Conversations for the signed-in user.

    ``jobId`` selects the active conversation; unknown or missing ids fall
    back to the first one. With no messages at all the page is an empty
    state.
    """
    conversations = await fetch_conversations(db, session.user_id)
    layout = build_layout(session)
    if not conversations:
        return MessagesPage(layout=layout, empty=True)

    active = select_conversation(conversations, job_id)
    return MessagesPage(
        layout=layout,
        empty=False,
        conversations=[
            ConversationLink(
                job=c.job,
                href=f"/messages?jobId={c.job.id}",
                active=c.job.id == active.job.id,
            )
            for c in conversations
        ],
        active=build_active(active, session.user_id),
    )


@router.post(
    "",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    responses=FORM_ERROR_RESPONSES,
)
async def send_message(
    form: MessageCreate,
    settings: ConfiguredSettings,
    session: CurrentSession,
    db: Backend,
):
    if not form.recipient_id:
        return form_error("Select a participant to message.")
    if form.recipient_id == session.user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot message yourself",
        )

    try:
        created = await create_message(
            db, form.job_id, session.user_id, form.recipient_id, form.content
        )
    except RecordAccessError as e:
        return form_error(e.message)

    logger.info(f"Message sent | job={form.job_id} | sender={session.user_id}")
    return Message.model_validate(created)
