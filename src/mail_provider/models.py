"""Pydantic models for an outgoing Gmail message and the API's reply (subset we need)."""

from pydantic import BaseModel, Field


class SendPayload(BaseModel):
    """A single plain-text message."""

    sender: str
    to: str
    subject: str = ""
    body: str = ""


class SendResult(BaseModel):
    """Gmail users.messages resource returned by send."""

    id: str
    thread_id: str | None = Field(None, alias="threadId")
    label_ids: list[str] = Field(default_factory=list, alias="labelIds")
    status_code: int | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}
