"""
Scalar Field Module

Holds a cubic N x N x N grid of samples and its value range.

Samples are kept in a single flat float64 buffer of length N**3, laid out
with i slowest-varying and k fastest (flat = i*N*N + j*N + k), which is the
same order in which the volume file lists them.
"""

from typing import Tuple
import numpy as np


class GridIndexError(IndexError):
    """Raised on out-of-range grid access. Indicates a programming error."""


class ScalarField:
    """
    Sampled cubic volume.

    Instances are never mutated after construction. Loading a new volume
    produces a new ScalarField.
    """

    def __init__(self, size: int, values: np.ndarray):
        """
        Initialize a field from a flat buffer.

        Args:
            size: Number of samples along each axis (N)
            values: Flat array of N**3 samples in i -> j -> k order
        """
        if size < 2:
            raise ValueError(f"Field size must be at least 2, got {size}")

        flat = np.array(values, dtype=np.float64).reshape(-1)
        if flat.size != size ** 3:
            raise ValueError(
                f"Expected {size ** 3} samples for N={size}, got {flat.size}"
            )
        flat.setflags(write=False)

        self._size = size
        self._values = flat
        self._min_value = float(flat.min())
        self._max_value = float(flat.max())

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'ScalarField':
        """Build a field from an (N, N, N) array indexed [i, j, k]."""
        array = np.asarray(array, dtype=np.float64)
        if array.ndim != 3 or len(set(array.shape)) != 1:
            raise ValueError(f"Expected a cubic (N, N, N) array, got shape {array.shape}")
        return cls(array.shape[0], array.reshape(-1))

    @property
    def size(self) -> int:
        return self._size

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self._size, self._size, self._size)

    @property
    def min_value(self) -> float:
        return self._min_value

    @property
    def max_value(self) -> float:
        return self._max_value

    @property
    def value_range(self) -> float:
        return self._max_value - self._min_value

    @property
    def values(self) -> np.ndarray:
        """Read-only flat sample buffer."""
        return self._values

    @property
    def cube_count(self) -> int:
        """Number of elementary cubes, (N-1)**3."""
        return (self._size - 1) ** 3

    def as_array(self) -> np.ndarray:
        """Read-only (N, N, N) view of the samples."""
        return self._values.reshape(self.shape)

    def _check_index(self, i: int, j: int, k: int) -> None:
        n = self._size
        if not (0 <= i < n and 0 <= j < n and 0 <= k < n):
            raise GridIndexError(f"Grid index ({i}, {j}, {k}) outside [0, {n})")

    def flat_index(self, i: int, j: int, k: int) -> int:
        self._check_index(i, j, k)
        n = self._size
        return i * n * n + j * n + k

    def grid_point(self, flat: int) -> Tuple[int, int, int]:
        """Inverse of flat_index."""
        n = self._size
        if not 0 <= flat < n ** 3:
            raise GridIndexError(f"Flat index {flat} outside [0, {n ** 3})")
        i, rest = divmod(flat, n * n)
        j, k = divmod(rest, n)
        return (i, j, k)

    def sample(self, i: int, j: int, k: int) -> float:
        """Bounds-checked sample accessor."""
        return float(self._values[self.flat_index(i, j, k)])

    def level_at(self, fraction: float) -> float:
        """
        Absolute isovalue at a fraction of the value range.

        Args:
            fraction: 0.0 maps to min_value, 1.0 to max_value

        Returns:
            min_value + fraction * (max_value - min_value)
        """
        return self._min_value + fraction * self.value_range

    def __repr__(self) -> str:
        return (
            f"ScalarField(N={self._size}, min={self._min_value:.4g}, "
            f"max={self._max_value:.4g})"
        )
