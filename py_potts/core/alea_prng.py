"""
Seeded uniform random source for location algorithms.

Implements Johannes Baagøe's Alea generator. Every randomized routine in
``py_potts`` draws from an instance passed in explicitly by the caller, so a
fixed seed and call order always reproduce the same tissue layout and the
same division outcomes.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

_NORM_32 = 2.3283064365386963e-10  # 2^-32


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


def _masher():
    n = 0xEFC8249D

    def mash(data) -> float:
        nonlocal n
        for char in str(data):
            n = n + ord(char)
            h = 0.02519603282416938 * n
            n = _uint32(h)
            h -= n
            h *= n
            n = _uint32(h)
            h -= n
            n += h * 0x100000000  # 2^32
        return _uint32(n) * _NORM_32

    return mash


class AleaPRNG:
    """
    Alea pseudo-random generator producing doubles in [0, 1).

    Seeds may be strings, numbers, or an iterable of either.
    """

    def __init__(self, seed):
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash = _masher()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * _NORM_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def next_int(self, n: int) -> int:
        """Uniform integer in [0, n)."""
        if n <= 0:
            raise ValueError(f"Upper bound must be positive, got {n}")
        return min(int(self.random() * n), n - 1)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.next_int(len(seq))]

    def shuffle(self, items: List[T]) -> None:
        """Shuffle a list in place (Fisher-Yates, drawing from the back)."""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(i + 1)
            items[i], items[j] = items[j], items[i]
