"""Bearer token verification with PyJWT."""
from __future__ import annotations

import asyncio
from typing import Any

import jwt
from jwt import PyJWKClient

from pairchat.application.ports.auth import Principal
from pairchat.infrastructure.auth.claims import principal_from_claims

ASYMMETRIC_ALGORITHMS = ["RS256", "ES256"]


class _JWTVerifier:
    def __init__(self, *, leeway: float = 0) -> None:
        self._leeway = leeway

    def _decode(self, token: str, key: Any, algorithms: list[str]) -> Principal:
        payload = jwt.decode(token, key, algorithms=algorithms, leeway=self._leeway)
        return principal_from_claims(payload)


class HS256Verifier(_JWTVerifier):
    """Tokens signed with a secret shared with the auth service."""

    def __init__(self, secret: str, algorithm: str = "HS256", *, leeway: float = 0) -> None:
        super().__init__(leeway=leeway)
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: str) -> Principal:
        return self._decode(token, self._secret, [self._algorithm])


class JWKSVerifier(_JWTVerifier):
    """Tokens signed with a key published on a JWKS endpoint."""

    def __init__(self, jwks_url: str, *, leeway: float = 0) -> None:
        super().__init__(leeway=leeway)
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> Principal:
        # PyJWKClient fetches keys with blocking urllib
        signing_key = await asyncio.to_thread(self._jwk_client.get_signing_key_from_jwt, token)
        return self._decode(token, signing_key.key, ASYMMETRIC_ALGORITHMS)
