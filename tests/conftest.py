"""Shared fixtures for the isomesh test suite."""

import numpy as np
import pytest

from isomesh.core import ScalarField

SPHERE_SIZE = 16
SPHERE_RADIUS = 5.0
SPHERE_CENTER = 7.5


def sphere_array(size: int = SPHERE_SIZE,
                 radius: float = SPHERE_RADIUS,
                 center: float = SPHERE_CENTER) -> np.ndarray:
    """radius - distance to center; positive inside the ball."""
    idx = np.arange(size, dtype=np.float64)
    i, j, k = np.meshgrid(idx, idx, idx, indexing='ij')
    dist = np.sqrt((i - center) ** 2 + (j - center) ** 2 + (k - center) ** 2)
    return radius - dist


@pytest.fixture
def write_volume(tmp_path):
    """Factory writing a volume file and returning its path as a string."""
    def _write(text: str, name: str = "volume.txt") -> str:
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write


@pytest.fixture
def two_layer_field():
    # i = 0 layer is 0, i = 1 layer is 1
    return ScalarField(2, [0, 0, 0, 0, 1, 1, 1, 1])


@pytest.fixture
def sphere_field():
    return ScalarField.from_array(sphere_array())
