"""Running totals for tree walks.

Every counter exposes the same small interface (``add``, ``increment``,
``get``, ``reset``) so visitors never need to know which flavor they hold.
``LongCounter`` mimics a signed 64-bit accumulator and raises
``OverflowError`` instead of wrapping; ``BigIntCounter`` is unbounded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

LONG_MAX = 2**63 - 1
LONG_MIN = -(2**63)


@runtime_checkable
class Counter(Protocol):
    def add(self, value: int) -> None: ...

    def increment(self) -> None: ...

    def get(self) -> int: ...

    def reset(self) -> None: ...


class LongCounter:
    """Fixed-width counter bounded to the signed 64-bit range."""

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value = 0

    def add(self, value: int) -> None:
        total = self._value + value
        if not LONG_MIN <= total <= LONG_MAX:
            raise OverflowError(f"LongCounter overflow: {self._value} + {value}")
        self._value = total

    def increment(self) -> None:
        self.add(1)

    def get(self) -> int:
        return self._value

    def reset(self) -> None:
        self._value = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (LongCounter, BigIntCounter)):
            return NotImplemented
        return self.get() == other.get()

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"LongCounter({self._value})"


class BigIntCounter:
    """Arbitrary-precision counter for totals that may exceed 64 bits."""

    __slots__ = ("_value",)

    def __init__(self) -> None:
        self._value = 0

    def add(self, value: int) -> None:
        self._value += value

    def increment(self) -> None:
        self._value += 1

    def get(self) -> int:
        return self._value

    def reset(self) -> None:
        self._value = 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (LongCounter, BigIntCounter)):
            return NotImplemented
        return self.get() == other.get()

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"BigIntCounter({self._value})"


class NoopCounter:
    """Counter that discards every update and always reads zero."""

    __slots__ = ()

    def add(self, value: int) -> None:
        pass

    def increment(self) -> None:
        pass

    def get(self) -> int:
        return 0

    def reset(self) -> None:
        pass

    def __repr__(self) -> str:
        return "NoopCounter()"


@dataclass
class PathCounters:
    """File, directory and byte totals accumulated by one walk.

    The default bundle keeps the byte total unbounded and the entry counts
    fixed-width.
    """

    byte_counter: Counter = field(default_factory=BigIntCounter)
    directory_counter: Counter = field(default_factory=LongCounter)
    file_counter: Counter = field(default_factory=LongCounter)

    def reset(self) -> None:
        self.byte_counter.reset()
        self.directory_counter.reset()
        self.file_counter.reset()

    def __repr__(self) -> str:
        return (
            f"PathCounters(files={self.file_counter.get()}, "
            f"directories={self.directory_counter.get()}, "
            f"bytes={self.byte_counter.get()})"
        )


def long_path_counters() -> PathCounters:
    return PathCounters(LongCounter(), LongCounter(), LongCounter())


def big_int_path_counters() -> PathCounters:
    return PathCounters(BigIntCounter(), BigIntCounter(), BigIntCounter())


def noop_path_counters() -> PathCounters:
    return PathCounters(NoopCounter(), NoopCounter(), NoopCounter())
