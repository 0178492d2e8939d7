"""Bundle lane offsets inside column gutters and stable attribute hashing."""

from __future__ import annotations

import zlib
from collections.abc import Sequence

from entity_metro.layout.constants import LANE_MARGIN
from entity_metro.layout.routing.common import BundleKey, EdgeDraft


def attribute_hash(attr: str) -> int:
    """Stable 32-bit hash of an attribute tag (CRC32 of its UTF-8 bytes)."""
    return zlib.crc32(attr.encode("utf-8")) & 0xFFFFFFFF


def palette_index(attr: str, palette_size: int) -> int:
    if palette_size <= 0:
        return 0
    h = attribute_hash(attr)
    return (h ^ (h >> 16)) % palette_size


def bundle_offsets(
    drafts: Sequence[EdgeDraft],
    column_gap: float,
) -> dict[tuple[int, BundleKey], float]:
    """Assign every bundle a lane offset in each gutter it touches.

    Keys are collected per gutter boundary in draft order (start boundary
    before end boundary); ``n`` distinct keys are spread evenly over
    ``[-max_offset, max_offset]`` with ``max_offset = gap / 2 - 4``. A
    lone key sits on the gutter center.

    Returns dict mapping ``(boundary, bundle_key)`` -> x offset.
    """
    max_offset = max(column_gap * 0.5 - LANE_MARGIN, 0.0)
    keys_by_boundary: dict[int, list[BundleKey]] = {}
    for draft in drafts:
        key = draft.bundle_key
        for boundary in (draft.start_boundary, draft.end_boundary):
            keys = keys_by_boundary.setdefault(boundary, [])
            if key not in keys:
                keys.append(key)

    offsets: dict[tuple[int, BundleKey], float] = {}
    for boundary, keys in keys_by_boundary.items():
        if max_offset <= 0.01 or len(keys) == 1:
            offsets[(boundary, keys[0])] = 0.0
            continue
        step = max_offset * 2 / (len(keys) - 1)
        for i, key in enumerate(keys):
            offsets[(boundary, key)] = -max_offset + step * i
    return offsets
