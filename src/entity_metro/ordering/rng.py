"""Deterministic generators shared by the annealer and its helpers.

Chains use a 32-bit linear congruential generator so that each lane's
stream is fully determined by the global seed and the chain index; the
temperature sampler uses a 64-bit LCG and returns the high word.
"""

from __future__ import annotations

import numpy as np

from entity_metro.ordering.constants import (
    LCG64_A,
    LCG_A,
    LCG_C,
    SEED_MIX,
    U32_MASK,
    U64_MASK,
)

_LCG_A_U32 = np.uint32(LCG_A)
_LCG_C_U32 = np.uint32(LCG_C)


def seed_to_u32(seed: int) -> int:
    """Fold a 64-bit seed into 32 bits (low word xor mixed high word)."""
    seed &= U64_MASK
    low = seed & U32_MASK
    high = seed >> 32
    return (low ^ (high * SEED_MIX)) & U32_MASK


def chain_seed(seed32: int, chain_index: int) -> int:
    """Initial LCG state of chain ``chain_index``."""
    return ((seed32 ^ (chain_index & U32_MASK)) * SEED_MIX) & U32_MASK


def lcg_next(state: int) -> int:
    return (state * LCG_A + LCG_C) & U32_MASK


def lcg_next_lanes(states: np.ndarray) -> np.ndarray:
    """Advance a uint32 array of LCG states by one step (wrapping)."""
    return states * _LCG_A_U32 + _LCG_C_U32


def shuffled_order(node_count: int, state: int) -> tuple[list[int], int]:
    """Fisher-Yates shuffle of ``range(node_count)`` driven by the LCG.

    Returns the permutation and the advanced generator state.
    """
    order = list(range(node_count))
    if node_count > 1:
        for i in range(node_count):
            state = lcg_next(state)
            j = i + state % (node_count - i)
            order[i], order[j] = order[j], order[i]
    return order, state


class LcgRng:
    """64-bit LCG producing 32-bit draws from the high word."""

    def __init__(self, seed: int) -> None:
        self.state = seed & U64_MASK

    def next_u32(self) -> int:
        self.state = (self.state * LCG64_A + 1) & U64_MASK
        return self.state >> 32

    def gen_range(self, upper: int) -> int:
        if upper <= 0:
            return 0
        return self.next_u32() % upper

    def distinct_pair(self, upper: int) -> tuple[int, int]:
        """Two distinct indices in ``[0, upper)``; ``upper`` must be >= 2."""
        i = self.gen_range(upper)
        j = self.gen_range(upper - 1)
        if j >= i:
            j += 1
        return i, j
