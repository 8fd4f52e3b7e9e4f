"""
Edge Vertex Cache Module

Deduplicates surface vertices on grid edges shared by neighbouring cubes.

Every grid edge is identified by an EdgeKey: the sorted pair of the flat
indices of its two grid points. Sorting makes the key independent of which
adjacent cube, and which of the cube's local edges, reaches the edge first.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

logger = logging.getLogger(__name__)

EdgeKey = Tuple[int, int]

# Interpolation parameter used when both endpoint samples are equal
DEGENERATE_EDGE_ALPHA = 0.5


def make_edge_key(flat_a: int, flat_b: int) -> EdgeKey:
    """Canonical, order-independent key for the grid edge between two points."""
    if flat_a == flat_b:
        raise ValueError(f"Edge endpoints must differ, got {flat_a} twice")
    return (flat_a, flat_b) if flat_a < flat_b else (flat_b, flat_a)


@dataclass
class EdgeInterpolation:
    """Result of placing a surface vertex on one edge."""
    position: np.ndarray
    alpha: float
    degenerate: bool = False
    clamped: bool = False


def interpolate_edge(isovalue: float,
                     value0: float,
                     value1: float,
                     pos0: np.ndarray,
                     pos1: np.ndarray) -> EdgeInterpolation:
    """
    Linearly interpolate the isovalue crossing along an edge.

    alpha = (isovalue - value0) / (value1 - value0), clamped to [0, 1].
    A flat edge (value0 == value1) has no crossing parameter and falls back
    to the midpoint.

    Args:
        isovalue: Threshold defining the surface
        value0, value1: Samples at the two endpoints
        pos0, pos1: Positions of the two endpoints

    Returns:
        EdgeInterpolation with position and diagnostic flags
    """
    pos0 = np.asarray(pos0, dtype=np.float64)
    pos1 = np.asarray(pos1, dtype=np.float64)

    denominator = value1 - value0
    degenerate = denominator == 0
    clamped = False

    if degenerate:
        alpha = DEGENERATE_EDGE_ALPHA
    else:
        alpha = (isovalue - value0) / denominator
        if alpha < 0.0 or alpha > 1.0:
            clamped = True
            alpha = min(max(alpha, 0.0), 1.0)

    position = pos0 + alpha * (pos1 - pos0)
    return EdgeInterpolation(position=position, alpha=alpha, degenerate=degenerate, clamped=clamped)


class EdgeVertexCache:
    """
    Maps EdgeKeys to vertex handles for one reconstruction pass.

    New vertices are appended to the target builder through its add_vertex
    method, which must return an integer handle.
    """

    def __init__(self, isovalue: float, builder):
        self.isovalue = float(isovalue)
        self.builder = builder
        self._handles: Dict[EdgeKey, int] = {}

        self.hits = 0
        self.degenerate_edges = 0
        self.clamped_edges = 0

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, edge_key: EdgeKey) -> bool:
        return edge_key in self._handles

    def get(self, edge_key: EdgeKey):
        return self._handles.get(edge_key)

    def resolve(self,
                edge_key: EdgeKey,
                value0: float,
                value1: float,
                pos0: np.ndarray,
                pos1: np.ndarray) -> int:
        """
        Return the vertex handle for an edge, creating the vertex on first visit.

        Endpoint 0 is expected to be the grid point with the lower flat index
        (edge_key[0]) so that a vertex's position does not depend on the cube
        that created it.

        Args:
            edge_key: Canonical key of the edge
            value0, value1: Samples at the endpoints
            pos0, pos1: Positions of the endpoints

        Returns:
            Integer vertex handle
        """
        handle = self._handles.get(edge_key)
        if handle is not None:
            self.hits += 1
            return handle

        result = interpolate_edge(self.isovalue, value0, value1, pos0, pos1)
        if result.degenerate:
            self.degenerate_edges += 1
            logger.warning(
                f"Degenerate edge {edge_key}: both samples equal {value0:.6g}, using midpoint"
            )
        elif result.clamped:
            self.clamped_edges += 1
            logger.debug(f"Clamped interpolation on edge {edge_key}")

        handle = self.builder.add_vertex(result.position)
        self._handles[edge_key] = handle
        return handle
