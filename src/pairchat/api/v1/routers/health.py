from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from pairchat.api.deps import ContainerDep
from pairchat.bootstrap import Container

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


async def _check_postgres(container: Container) -> None:
    assert container.engine is not None
    async with container.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _check_redis(container: Container) -> None:
    await container.redis.ping()


@router.get("/readyz")
async def readyz(container: ContainerDep) -> JSONResponse:
    """Per-dependency status; 503 if any of them is down."""
    probes: dict[str, Callable[[Container], Awaitable[None]]] = {"redis": _check_redis}
    if container.engine is not None:
        probes["postgres"] = _check_postgres

    checks: dict[str, str] = {}
    for name, probe in probes.items():
        try:
            await probe(container)
            checks[name] = "ok"
        except Exception as exc:  # noqa: BLE001
            logger.warning("Readiness check %s failed: %s", name, exc)
            checks[name] = f"error: {exc}"

    ready = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "unavailable", "checks": checks},
    )
