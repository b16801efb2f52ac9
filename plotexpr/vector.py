"""A small mutable mathematical vector of floats."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Union

_Values = Union[int, Iterable[float]]


class Vector:
    """A fixed-length sequence of floats with element-wise arithmetic.

    ``Vector(n)`` creates a vector of ``n`` zeros. ``Vector(iterable)``
    copies the given values.
    """

    __slots__ = ("_data",)

    def __init__(self, values: _Values = ()) -> None:
        if isinstance(values, int):
            if values < 0:
                raise ValueError("vector size must not be negative")
            self._data = [0.0] * values
        else:
            self._data = [float(v) for v in values]

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Vector(self._data[index])
        return self._data[index]

    def __setitem__(self, index: int, value: float) -> None:
        self._data[index] = float(value)

    def __iter__(self) -> Iterator[float]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"Vector({self._data!r})"

    def _check_same_size(self, other: Vector) -> None:
        if len(self) != len(other):
            raise ValueError(
                f"vector sizes differ: {len(self)} and {len(other)}"
            )

    def __add__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        result = Vector(self)
        result += other
        return result

    def __iadd__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_size(other)
        self._data = [a + b for a, b in zip(self._data, other._data)]
        return self

    def __sub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        result = Vector(self)
        result -= other
        return result

    def __isub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        self._check_same_size(other)
        self._data = [a - b for a, b in zip(self._data, other._data)]
        return self

    def __mul__(self, factor: float) -> Vector:
        if not isinstance(factor, (int, float)):
            return NotImplemented
        result = Vector(self)
        result *= factor
        return result

    def __rmul__(self, factor: float) -> Vector:
        return self.__mul__(factor)

    def __imul__(self, factor: float) -> Vector:
        if not isinstance(factor, (int, float)):
            return NotImplemented
        self._data = [a * factor for a in self._data]
        return self

    def resize(self, size: int) -> None:
        """Truncate, or pad with zeros, to ``size`` elements."""
        if size < 0:
            raise ValueError("vector size must not be negative")
        current = len(self._data)
        if size < current:
            del self._data[size:]
        elif size > current:
            self._data.extend([0.0] * (size - current))

    def combine(self, a: Vector, k: float, b: Vector) -> None:
        """Set the contents of this vector to ``a + k * b``."""
        a._check_same_size(b)
        self._data = [x + k * y for x, y in zip(a._data, b._data)]

    def add_rk4(
        self, dx: float, k1: Vector, k2: Vector, k3: Vector, k4: Vector
    ) -> None:
        """Add one classic Runge-Kutta step ``dx/6 (k1 + 2k2 + 2k3 + k4)``."""
        for k in (k1, k2, k3, k4):
            self._check_same_size(k)
        step = dx / 6
        self._data = [
            d + step * (a + 2 * b + 2 * c + e)
            for d, a, b, c, e in zip(
                self._data, k1._data, k2._data, k3._data, k4._data
            )
        ]