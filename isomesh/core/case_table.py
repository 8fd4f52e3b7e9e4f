"""
Case Table Module

Read-only lookup from an 8-bit cube configuration to its triangulation.

The reconstruction never derives triangulations itself; it receives a
CaseTable at construction time and only queries it. The default instance
wraps the standard marching cubes tables from mc_tables.
"""

from typing import Sequence, Tuple

from isomesh.core.mc_tables import CORNER_OFFSETS, EDGE_ENDPOINTS, TRI_TABLE

Triangle = Tuple[int, int, int]

CONFIGURATION_COUNT = 256
EDGE_COUNT = 12
CORNER_COUNT = 8


class CaseTableError(ValueError):
    """Raised when supplied table data is inconsistent."""


class CaseTable:
    """
    Validated, immutable marching cubes case table.

    Triangles are stored as tuples of three edge indices, in the winding
    given by the source table.
    """

    def __init__(self,
                 tri_table: Sequence[Sequence[int]],
                 edge_endpoints: Sequence[Tuple[int, int]] = EDGE_ENDPOINTS,
                 corner_offsets: Sequence[Tuple[int, int, int]] = CORNER_OFFSETS):
        """
        Initialize and validate the table.

        Args:
            tri_table: 256 rows of edge indices, grouped in threes and
                optionally padded with -1
            edge_endpoints: 12 (cornerA, cornerB) pairs
            corner_offsets: 8 (dx, dy, dz) offsets in {0, 1}

        Raises:
            CaseTableError: if any table is malformed
        """
        self._corner_offsets = self._validate_corners(corner_offsets)
        self._edge_endpoints = self._validate_edges(edge_endpoints)
        self._triangles = self._validate_triangles(tri_table)

    @staticmethod
    def _validate_corners(corner_offsets) -> Tuple[Tuple[int, int, int], ...]:
        offsets = tuple(tuple(int(c) for c in offset) for offset in corner_offsets)
        if len(offsets) != CORNER_COUNT:
            raise CaseTableError(f"Expected {CORNER_COUNT} corner offsets, got {len(offsets)}")
        for offset in offsets:
            if len(offset) != 3 or any(c not in (0, 1) for c in offset):
                raise CaseTableError(f"Invalid corner offset {offset}")
        if len(set(offsets)) != CORNER_COUNT:
            raise CaseTableError("Corner offsets must be distinct")
        return offsets

    @staticmethod
    def _validate_edges(edge_endpoints) -> Tuple[Tuple[int, int], ...]:
        edges = tuple((int(a), int(b)) for a, b in edge_endpoints)
        if len(edges) != EDGE_COUNT:
            raise CaseTableError(f"Expected {EDGE_COUNT} edges, got {len(edges)}")
        for a, b in edges:
            if not (0 <= a < CORNER_COUNT and 0 <= b < CORNER_COUNT) or a == b:
                raise CaseTableError(f"Invalid edge endpoints ({a}, {b})")
        return edges

    @staticmethod
    def _validate_triangles(tri_table) -> Tuple[Tuple[Triangle, ...], ...]:
        if len(tri_table) != CONFIGURATION_COUNT:
            raise CaseTableError(
                f"Expected {CONFIGURATION_COUNT} configurations, got {len(tri_table)}"
            )

        rows = []
        for config, row in enumerate(tri_table):
            edges = [int(e) for e in row]
            if -1 in edges:
                edges = edges[:edges.index(-1)]
            if len(edges) % 3 != 0:
                raise CaseTableError(
                    f"Configuration {config}: {len(edges)} edge indices is not a multiple of 3"
                )
            for e in edges:
                if not 0 <= e < EDGE_COUNT:
                    raise CaseTableError(f"Configuration {config}: edge index {e} out of range")
            rows.append(tuple(
                (edges[t], edges[t + 1], edges[t + 2]) for t in range(0, len(edges), 3)
            ))
        return tuple(rows)

    @property
    def edge_endpoints(self) -> Tuple[Tuple[int, int], ...]:
        return self._edge_endpoints

    @property
    def corner_offsets(self) -> Tuple[Tuple[int, int, int], ...]:
        return self._corner_offsets

    def triangles_for(self, configuration: int) -> Tuple[Triangle, ...]:
        """Triangles (edge index triples) for a configuration in [0, 255]."""
        if not 0 <= configuration < CONFIGURATION_COUNT:
            raise IndexError(f"Configuration {configuration} outside [0, {CONFIGURATION_COUNT})")
        return self._triangles[configuration]

    def triangle_count(self, configuration: int) -> int:
        return len(self.triangles_for(configuration))


STANDARD_CASE_TABLE = CaseTable(TRI_TABLE)
