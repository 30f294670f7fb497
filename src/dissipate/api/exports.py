"""Export routes — download all of the caller's messages."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate.auth.dependencies import CurrentIdentity, get_current_user
from dissipate.db.engine import get_db
from dissipate.services.export_service import render_json, render_markdown
from dissipate.services.message_service import MessageService

router = APIRouter(prefix="/export")


def _msg_svc(db: AsyncSession = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.get("/json")
async def export_json(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    messages = await svc.list_messages(identity.user_id)
    return Response(
        content=render_json(messages),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="messages.json"'},
    )


@router.get("/markdown")
async def export_markdown(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: MessageService = Depends(_msg_svc),
):
    messages = await svc.list_messages(identity.user_id)
    return Response(
        content=render_markdown(messages),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="messages.md"'},
    )
