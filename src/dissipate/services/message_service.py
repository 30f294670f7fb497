"""Message service — CRUD for journal entries, scoped to their owner.

Learn: Every method takes the caller's user_id (from the verified token)
and checks it against the row's owner. Authorization is exactly
"token subject == message owner"; nothing here trusts an owner id
supplied in a request body.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate.db.models import Message, utcnow


class MessageNotFoundError(Exception):
    """Raised when the message doesn't exist."""
    pass


class MessageForbiddenError(Exception):
    """Raised when the message belongs to someone else."""
    pass


class DuplicateMessageError(Exception):
    """Raised when a client-generated id is already taken."""
    pass


class MessageService:
    """Business logic for message CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_messages(
        self, user_id: str, since: Optional[datetime] = None
    ) -> list[Message]:
        """List the user's messages, newest first.

        `since` keeps only messages created or edited strictly after it,
        which is what an offline client needs to catch up.
        """
        q = select(Message).where(Message.user_id == user_id)
        if since is not None:
            q = q.where(Message.updated_at > since)
        q = q.order_by(Message.created_at.desc())
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def create_message(
        self,
        user_id: str,
        content: str,
        message_id: Optional[uuid.UUID] = None,
    ) -> Message:
        if message_id is not None and await self.db.get(Message, str(message_id)):
            raise DuplicateMessageError(f"Message {message_id} already exists")

        now = utcnow()
        message = Message(
            id=str(message_id or uuid.uuid4()),
            user_id=user_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self.db.add(message)
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def get_owned_message(self, user_id: str, message_id: str) -> Message:
        message = await self.db.get(Message, message_id)
        if not message:
            raise MessageNotFoundError(f"Message {message_id} not found")
        if message.user_id != user_id:
            raise MessageForbiddenError(f"Message {message_id} belongs to another user")
        return message

    async def update_message(self, user_id: str, message_id: str, content: str) -> Message:
        message = await self.get_owned_message(user_id, message_id)
        message.content = content
        message.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(message)
        return message

    async def delete_message(self, user_id: str, message_id: str) -> None:
        message = await self.get_owned_message(user_id, message_id)
        await self.db.delete(message)
        await self.db.commit()
