"""Errors raised by services and policies.

`code` is the machine-readable reason sent to clients, both in HTTP error
bodies and in socket `error` events; `detail` is the human-readable text.
"""
from __future__ import annotations


class AppError(Exception):
    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    code = "not_found"


class ForbiddenError(AppError):
    code = "forbidden"


class ValidationError(AppError):
    """Bad client input: empty or oversized content, malformed cursors."""

    code = "invalid"
