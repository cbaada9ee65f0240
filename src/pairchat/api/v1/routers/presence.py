from __future__ import annotations

from fastapi import APIRouter

from pairchat.api.deps import CurrentPrincipal, PresenceDep
from pairchat.api.v1.schemas.presence import OnlineUsersResponse, UserPresenceResponse

router = APIRouter(prefix="/api/v1/chat/presence", tags=["presence"])


@router.get("", response_model=OnlineUsersResponse)
async def online_users(
    _principal: CurrentPrincipal,
    presence: PresenceDep,
) -> OnlineUsersResponse:
    return OnlineUsersResponse(
        online=await presence.count(),
        user_ids=sorted(await presence.members()),
    )


@router.get("/{user_id}", response_model=UserPresenceResponse)
async def user_presence(
    user_id: int,
    _principal: CurrentPrincipal,
    presence: PresenceDep,
) -> UserPresenceResponse:
    return UserPresenceResponse(user_id=user_id, online=await presence.contains(user_id))
