"""Strategies that split the active-user pool into (sender, receiver) pairs."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol, Sequence

from pairchat.domain.value_objects.enums import PairingMode


@dataclass(frozen=True, slots=True)
class Pair:
    sender_id: int
    receiver_id: int


class PairingStrategy(Protocol):
    def pair(self, user_ids: Sequence[int]) -> list[Pair]: ...


class DisjointPairing:
    """Consecutive shuffled users become pairs; an odd leftover sits the run out."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def pair(self, user_ids: Sequence[int]) -> list[Pair]:
        order = list(user_ids)
        self._rng.shuffle(order)
        return self._pair_ordered(order)

    def _pair_ordered(self, order: list[int]) -> list[Pair]:
        return [
            Pair(sender_id=order[i], receiver_id=order[i + 1])
            for i in range(0, len(order) - 1, 2)
        ]


class WrapAroundPairing(DisjointPairing):
    """An odd leftover sends to the first shuffled user, so everyone sends once."""

    def _pair_ordered(self, order: list[int]) -> list[Pair]:
        pairs = super()._pair_ordered(order)
        if len(order) > 1 and len(order) % 2:
            pairs.append(Pair(sender_id=order[-1], receiver_id=order[0]))
        return pairs


def build_pairing(mode: PairingMode, rng: random.Random | None = None) -> PairingStrategy:
    if mode == PairingMode.WRAPAROUND:
        return WrapAroundPairing(rng)
    return DisjointPairing(rng)
