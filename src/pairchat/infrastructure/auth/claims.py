from __future__ import annotations

from typing import Any

import jwt

from pairchat.application.ports.auth import Principal


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build a Principal from decoded JWT claims (`sub`, or legacy `id`)."""
    raw_id = payload.get("sub", payload.get("id"))
    if raw_id is None:
        raise jwt.InvalidTokenError("Token has no subject")
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Token subject is not a user id") from exc
    return Principal(user_id=user_id, roles=tuple(payload.get("roles", ())))
