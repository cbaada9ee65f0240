from __future__ import annotations

from pairchat.application.ports.auth import TokenVerifier
from pairchat.config import Settings
from pairchat.infrastructure.auth.verifiers import HS256Verifier, JWKSVerifier


def build_verifier(settings: Settings) -> TokenVerifier:
    leeway = settings.JWT_LEEWAY_SECONDS
    if settings.JWT_VERIFY_MODE == "jwks":
        if not settings.JWKS_URL:
            raise RuntimeError("JWKS_URL must be set when JWT_VERIFY_MODE=jwks")
        return JWKSVerifier(settings.JWKS_URL, leeway=leeway)
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set when JWT_VERIFY_MODE=hs256")
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM, leeway=leeway)
