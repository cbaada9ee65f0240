from __future__ import annotations

import random
from typing import Sequence

DEFAULT_PHRASES: tuple[str, ...] = (
    "Hi, how are you?",
    "The weather is lovely today!",
    "What are you up to?",
    "It's been ages since we talked.",
    "Fancy grabbing a coffee?",
    "Good luck with your new project!",
    "Can you recommend a film?",
    "Any plans for the weekend?",
    "Reading anything good lately?",
    "Have you been doing any sport?",
    "Shall we go out for dinner?",
    "Did you catch the news today?",
    "Any holiday plans?",
    "How is work going?",
    "How is your family?",
)


class RandomPhraseGenerator:
    """Picks an opener uniformly from a fixed phrase list."""

    def __init__(
        self,
        phrases: Sequence[str] = DEFAULT_PHRASES,
        rng: random.Random | None = None,
    ) -> None:
        if not phrases:
            raise ValueError("phrases must not be empty")
        self._phrases = tuple(phrases)
        self._rng = rng or random.Random()

    def generate(self) -> str:
        return self._rng.choice(self._phrases)
