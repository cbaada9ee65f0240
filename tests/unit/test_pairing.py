from __future__ import annotations

import random

import pytest

from pairchat.application.policies.pairing import (
    DisjointPairing,
    WrapAroundPairing,
    build_pairing,
)
from pairchat.domain.value_objects.enums import PairingMode


@pytest.mark.parametrize("n", [2, 3, 10, 11])
def test_disjoint_pairs_use_each_user_at_most_once(n):
    pairs = DisjointPairing(random.Random(1)).pair(list(range(n)))

    used = [p.sender_id for p in pairs] + [p.receiver_id for p in pairs]
    assert len(pairs) == n // 2
    assert len(used) == len(set(used))
    assert all(p.sender_id != p.receiver_id for p in pairs)


def test_disjoint_odd_leftover_sits_out():
    pairs = DisjointPairing(random.Random(7)).pair([1, 2, 3])

    assert len(pairs) == 1
    used = {pairs[0].sender_id, pairs[0].receiver_id}
    assert len({1, 2, 3} - used) == 1


def test_fewer_than_two_users_yield_no_pairs():
    assert DisjointPairing().pair([]) == []
    assert DisjointPairing().pair([5]) == []
    assert WrapAroundPairing().pair([5]) == []


def test_wraparound_gives_everyone_a_send():
    pairs = WrapAroundPairing(random.Random(3)).pair([1, 2, 3, 4, 5])

    assert len(pairs) == 3
    assert {p.sender_id for p in pairs} | {p.receiver_id for p in pairs} == {1, 2, 3, 4, 5}
    # The extra pair sends from the leftover to the first shuffled user
    assert pairs[-1].receiver_id == pairs[0].sender_id


def test_wraparound_even_pool_matches_disjoint():
    users = [1, 2, 3, 4]

    wrap = WrapAroundPairing(random.Random(9)).pair(users)
    disjoint = DisjointPairing(random.Random(9)).pair(users)

    assert wrap == disjoint


def test_pairing_does_not_mutate_input():
    users = [1, 2, 3, 4]
    DisjointPairing(random.Random(0)).pair(users)
    assert users == [1, 2, 3, 4]


def test_build_pairing_by_mode():
    assert type(build_pairing(PairingMode.DISJOINT)) is DisjointPairing
    assert type(build_pairing(PairingMode.WRAPAROUND)) is WrapAroundPairing
