"""
Voxel Walker Module

Scans every elementary cube of a ScalarField and classifies its corners
against the isovalue.

A corner is inside when its sample is strictly greater than the isovalue.
Bit n of a cube's configuration is set when corner n is inside, with corners
numbered by the case table's corner offsets.
"""

import logging
from typing import Iterator, NamedTuple

import numpy as np

from isomesh.core.case_table import CaseTable, STANDARD_CASE_TABLE
from isomesh.core.scalar_field import GridIndexError, ScalarField

logger = logging.getLogger(__name__)

EMPTY_CONFIGURATION = 0
FULL_CONFIGURATION = 255


class CubeCase(NamedTuple):
    """A cube, identified by its minimum corner, and its configuration."""
    i: int
    j: int
    k: int
    configuration: int


def is_inside(value: float, isovalue: float) -> bool:
    return value > isovalue


class VoxelWalker:
    """
    Cube iterator for one field at one isovalue.

    Configurations for all cubes are computed in one vectorized pass and
    cached; the walk then visits only cubes the surface passes through.
    """

    def __init__(self,
                 field: ScalarField,
                 isovalue: float,
                 case_table: CaseTable = STANDARD_CASE_TABLE):
        self.field = field
        self.isovalue = float(isovalue)
        self.case_table = case_table
        self._configurations = None

    def configuration_at(self, i: int, j: int, k: int) -> int:
        """
        Configuration of the cube with minimum corner (i, j, k).

        Raises:
            GridIndexError: if (i, j, k) is not a valid cube origin
        """
        last = self.field.size - 2
        if not (0 <= i <= last and 0 <= j <= last and 0 <= k <= last):
            raise GridIndexError(f"Cube origin ({i}, {j}, {k}) outside [0, {last}]")

        configuration = 0
        for bit, (dx, dy, dz) in enumerate(self.case_table.corner_offsets):
            if is_inside(self.field.sample(i + dx, j + dy, k + dz), self.isovalue):
                configuration |= 1 << bit
        return configuration

    def configurations(self) -> np.ndarray:
        """
        Configurations of all cubes as an (N-1, N-1, N-1) uint8 array.

        Returns:
            Read-only array indexed [i, j, k] by cube origin
        """
        if self._configurations is None:
            volume = self.field.as_array()
            m = self.field.size - 1
            configs = np.zeros((m, m, m), dtype=np.uint8)

            for bit, (dx, dy, dz) in enumerate(self.case_table.corner_offsets):
                corner = volume[dx:dx + m, dy:dy + m, dz:dz + m]
                configs |= (corner > self.isovalue).astype(np.uint8) << np.uint8(bit)

            configs.setflags(write=False)
            self._configurations = configs
        return self._configurations

    def active_mask(self) -> np.ndarray:
        """Boolean mask of cubes that are neither fully inside nor fully outside."""
        configs = self.configurations()
        return (configs != EMPTY_CONFIGURATION) & (configs != FULL_CONFIGURATION)

    def count_active(self) -> int:
        return int(np.count_nonzero(self.active_mask()))

    def active_cubes(self) -> Iterator[CubeCase]:
        """
        Yield active cubes in scan order (i slowest, k fastest).

        Configurations 0 and 255 produce no triangles and are skipped.
        """
        configs = self.configurations()
        origins = np.argwhere(self.active_mask())
        logger.debug(
            f"Voxel walk: {len(origins)} active of {self.field.cube_count} cubes "
            f"at isovalue {self.isovalue:.4g}"
        )
        for i, j, k in origins:
            yield CubeCase(int(i), int(j), int(k), int(configs[i, j, k]))
