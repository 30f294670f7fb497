"""Export rendering — a user's messages as JSON or Markdown."""

import json
from datetime import datetime
from typing import Iterable, Optional

from dissipate.db.models import Message, utcnow
from dissipate.schemas.message import MessageRead


def render_json(messages: Iterable[Message]) -> str:
    """Pretty-printed JSON array of public message fields."""
    payload = [MessageRead.model_validate(m).model_dump(mode="json") for m in messages]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_markdown(messages: Iterable[Message], exported_at: Optional[datetime] = None) -> str:
    """One `## <date>` section per message, separated by horizontal rules."""
    exported_at = exported_at or utcnow()
    parts = [
        "# Messages Export\n\n",
        f"Exported: {exported_at.strftime('%B %d, %Y')}\n\n",
        "---\n\n",
    ]
    for message in messages:
        stamp = message.created_at.strftime("%B %d, %Y at %I:%M %p")
        parts.append(f"## {stamp}\n\n{message.content}\n\n---\n\n")
    return "".join(parts)
