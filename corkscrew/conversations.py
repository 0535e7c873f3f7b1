"""Groups a viewer's message log into per-job conversations."""

from dataclasses import dataclass, field

from .models import JobSummary, Message


@dataclass
class Conversation:
    job: JobSummary
    messages: list[Message] = field(default_factory=list)


def group_conversations(messages: list[Message], jobs: list[JobSummary]) -> list[Conversation]:
    """Pair each job with its messages.

    Messages keep their input order within a job. The result follows the
    order of ``jobs``; jobs without any message are left out.
    """
    grouped: dict[str, list[Message]] = {}
    for message in messages:
        grouped.setdefault(message.job_id, []).append(message)

    return [Conversation(job=job, messages=grouped[job.id]) for job in jobs if job.id in grouped]


def select_conversation(
    conversations: list[Conversation], job_id: str | None = None
) -> Conversation | None:
    """The conversation for ``job_id``, falling back to the first one."""
    if not conversations:
        return None
    if job_id:
        for conversation in conversations:
            if conversation.job.id == job_id:
                return conversation
    return conversations[0]


def resolve_counterpart(conversation: Conversation, viewer_id: str) -> str | None:
    """Who the viewer is talking to in this conversation.

    A worker only ever talks to the job's client. The client talks to the
    first other participant seen in the thread, and has nobody to answer
    until someone else has written.
    """
    if viewer_id != conversation.job.client_id:
        return conversation.job.client_id

    for message in conversation.messages:
        for participant in (message.sender_id, message.recipient_id):
            if participant != viewer_id:
                return participant
    return None
