"""Wire format for draft references carried on the queue."""
from __future__ import annotations

import json
from typing import Any
from uuid import UUID


class MalformedReference(ValueError):
    pass


def serialize_reference(draft_id: UUID) -> str:
    return json.dumps({"draftId": str(draft_id)})


def deserialize_reference(raw: str | bytes) -> UUID:
    try:
        data: Any = json.loads(raw)
        return UUID(data["draftId"])
    except (TypeError, KeyError, ValueError) as exc:
        raise MalformedReference(f"Bad draft reference: {raw!r}") from exc


def to_fields(draft_id: UUID, attempt: int) -> dict[str, str]:
    """Stream entry fields: the JSON payload plus a retry counter."""
    return {"payload": serialize_reference(draft_id), "attempt": str(attempt)}


def parse_attempt(fields: dict[str, str]) -> int:
    try:
        return max(int(fields.get("attempt", "0")), 0)
    except ValueError:
        return 0
