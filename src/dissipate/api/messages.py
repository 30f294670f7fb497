"""Message API routes.

Learn: Routes translate HTTP to MessageService calls and map its
exceptions to status codes:
- MessageNotFoundError → 404
- MessageForbiddenError → 403 (exists, but owned by someone else)
- DuplicateMessageError → 409 (client-generated id already used)

The owner is always identity.user_id from the verified token.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate.auth.dependencies import CurrentIdentity, get_current_user
from dissipate.db.engine import get_db
from dissipate.schemas.message import MessageCreate, MessageList, MessageRead, MessageUpdate
from dissipate.schemas.user import SuccessResponse
from dissipate.services.message_service import (
    DuplicateMessageError,
    MessageForbiddenError,
    MessageNotFoundError,
    MessageService,
)

router = APIRouter()


def _msg_svc(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.get("/messages", response_model=MessageList)
async def list_messages(
    since: Optional[datetime] = Query(None, description="Only messages updated after this ISO 8601 time"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    """List the caller's messages, newest first."""
    messages = await svc.list_messages(identity.user_id, since=since)
    return {"messages": messages}


@router.post("/messages", response_model=MessageRead, status_code=201)
async def create_message(
    body: MessageCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    """Create a message. Accepts an optional client-generated id."""
    try:
        return await svc.create_message(identity.user_id, body.content, message_id=body.id)
    except DuplicateMessageError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/messages/{message_id}", response_model=MessageRead)
async def update_message(
    message_id: str,
    body: MessageUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    """Replace a message's content."""
    try:
        return await svc.update_message(identity.user_id, message_id, body.content)
    except MessageNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MessageForbiddenError:
        raise HTTPException(status_code=403, detail="Forbidden")


@router.delete("/messages/{message_id}", response_model=SuccessResponse)
async def delete_message(
    message_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    """Delete a message."""
    try:
        await svc.delete_message(identity.user_id, message_id)
    except MessageNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MessageForbiddenError:
        raise HTTPException(status_code=403, detail="Forbidden")
    return SuccessResponse()
