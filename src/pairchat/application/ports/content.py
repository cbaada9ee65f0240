from __future__ import annotations

from typing import Protocol


class ContentGenerator(Protocol):
    def generate(self) -> str: ...
