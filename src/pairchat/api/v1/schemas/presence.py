from __future__ import annotations

from pydantic import BaseModel


class OnlineUsersResponse(BaseModel):
    online: int
    user_ids: list[int]


class UserPresenceResponse(BaseModel):
    user_id: int
    online: bool
