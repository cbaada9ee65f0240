"""FastAPI dependency injection helpers.

Everything is resolved from the `Container` stored on `app.state` so tests
can swap adapters without touching module globals.
"""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pairchat.application.ports.auth import Principal, TokenVerifier
from pairchat.application.ports.presence import PresenceStore
from pairchat.application.uow import UnitOfWork
from pairchat.bootstrap import Container

_bearer_scheme = HTTPBearer()


def get_container(request: Request) -> Container:
    return request.app.state.container


ContainerDep = Annotated[Container, Depends(get_container)]


async def get_uow(container: ContainerDep) -> AsyncIterator[UnitOfWork]:
    async with container.uow_factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


def get_verifier(container: ContainerDep) -> TokenVerifier:
    return container.verifier


def get_presence(container: ContainerDep) -> PresenceStore:
    return container.presence


PresenceDep = Annotated[PresenceStore, Depends(get_presence)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_verifier)],
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
