"""Cosmetic numbers derived from user ids.

Nothing here is used for matching or access control. The only requirement is
that the same seed always renders the same value, in the API and in any
browser client hashing the same string.
"""

COMPATIBILITY_BASE = 70
COMPATIBILITY_SPREAD = 31  # 70..100 inclusive


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def string_hash(seed: str) -> int:
    """``h = h * 31 + unit`` over UTF-16 code units, wrapped to signed 32 bits."""
    encoded = seed.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = _to_int32(h * 31 + unit)
    return h


def compute_compatibility(seed: str) -> int:
    return COMPATIBILITY_BASE + abs(string_hash(seed)) % COMPATIBILITY_SPREAD


def compute_online(seed: str) -> bool:
    return abs(string_hash(seed)) % 2 == 1


def pair_seed(user_id: str, other_id: str) -> str:
    return f"{user_id}-{other_id}"
