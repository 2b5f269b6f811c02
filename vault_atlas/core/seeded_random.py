"""
Deterministic hashing and a seeded linear congruential generator.

Layouts must not move between re-renders or process restarts, so every
pseudo-random value in the atlas comes from these two functions. Python's
random and NumPy's random are not used for layout.
"""

from typing import Iterator, Tuple

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MASK = 0x7FFFFFFF


def _int32(n: int) -> int:
    """Wrap to a signed 32-bit integer."""
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def _utf16_units(text: str) -> Iterator[int]:
    """Yield UTF-16 code units, so astral characters hash as surrogate pairs."""
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def hash_str(text: str) -> int:
    """
    Stable, case-sensitive string hash.

    Folds each code unit with ``h = (h << 5) - h + c`` in 32-bit signed
    arithmetic and returns the absolute value.

    Args:
        text: String to hash

    Returns:
        Non-negative integer hash
    """
    h = 0
    for unit in _utf16_units(text):
        h = _int32((h << 5) - h + unit)
    return abs(h)


def seeded_next(state: int) -> Tuple[float, int]:
    """
    Advance the generator one step.

    Returns:
        Tuple of (value in [0, 1], next state)
    """
    next_state = (state * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
    return next_state / LCG_MASK, next_state


class LcgPRNG:
    """Seeded LCG with a ``random()`` interface."""

    def __init__(self, seed: int):
        self.state = int(seed)
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1]."""
        self.call_count += 1
        value, self.state = seeded_next(self.state)
        return value

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[min(int(self.random() * len(seq)), len(seq) - 1)]
