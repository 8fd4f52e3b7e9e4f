"""
Isosurface Reconstruction Module

Extracts a triangulated isosurface from a ScalarField with marching cubes.

Algorithm:
1. Classify the corners of every cube against the isovalue (VoxelWalker)
2. Look up the triangulation of each non-trivial configuration (CaseTable)
3. Resolve every triangle edge to a shared vertex (EdgeVertexCache)
4. Collect triangles and compute normals once at the end (MeshBuilder)

The IsosurfaceSession wraps the pipeline with the load / set isovalue /
reconstruct control surface used by the viewer.
"""

import logging
import time
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from isomesh.core.case_table import CaseTable, STANDARD_CASE_TABLE
from isomesh.core.edge_cache import EdgeVertexCache, make_edge_key
from isomesh.core.mesh_builder import IsosurfaceMesh, MeshBuilder, SURFACE_COLOR
from isomesh.core.scalar_field import ScalarField
from isomesh.core.volume_loader import VolumeLoader, VolumeLoadResult
from isomesh.core.voxel_walker import VoxelWalker

logger = logging.getLogger(__name__)

# Initial isovalue of a new session
DEFAULT_ISOVALUE = 1.0


@dataclass
class ReconstructionSettings:
    """Geometry and appearance options for a reconstruction."""
    # Distance between neighbouring grid points; None means 1/N so the
    # volume fits in the unit cube
    cell_size: Optional[float] = None
    origin: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    face_color: Tuple[float, float, float] = SURFACE_COLOR

    def resolve_cell_size(self, size: int) -> float:
        if self.cell_size is None:
            return 1.0 / size
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        return float(self.cell_size)


class ReconstructionStatus(Enum):
    """Outcome of a reconstruction run."""
    MESH_READY = "mesh ready"
    NO_SURFACE = "no surface"


@dataclass
class ReconstructionStats:
    """Counters collected during one reconstruction run."""
    cubes_scanned: int = 0
    active_cubes: int = 0
    vertex_count: int = 0
    face_count: int = 0
    cache_hits: int = 0
    degenerate_edges: int = 0
    clamped_edges: int = 0
    elapsed_ms: float = 0.0


@dataclass
class ReconstructionResult:
    """Result of isosurface reconstruction."""
    status: ReconstructionStatus
    mesh: Optional[IsosurfaceMesh]
    isovalue: float
    stats: ReconstructionStats = dataclass_field(default_factory=ReconstructionStats)

    @property
    def is_empty(self) -> bool:
        return self.status == ReconstructionStatus.NO_SURFACE

    @property
    def triangle_count(self) -> int:
        return 0 if self.mesh is None else self.mesh.face_count


def reconstruct_isosurface(field: ScalarField,
                           isovalue: float,
                           case_table: CaseTable = STANDARD_CASE_TABLE,
                           settings: Optional[ReconstructionSettings] = None) -> ReconstructionResult:
    """
    Extract the isosurface of a field.

    Every call builds a fresh mesh; previously returned meshes are never
    touched.

    Args:
        field: The sampled volume
        isovalue: Threshold defining the surface
        case_table: Configuration to triangulation lookup
        settings: Geometry options (defaults to ReconstructionSettings())

    Returns:
        ReconstructionResult with the mesh, or NO_SURFACE status if the
        surface does not cross any cube
    """
    start_time = time.perf_counter()
    settings = settings or ReconstructionSettings()

    n = field.size
    cell_size = settings.resolve_cell_size(n)
    origin = np.asarray(settings.origin, dtype=np.float64)
    values = field.values

    walker = VoxelWalker(field, isovalue, case_table)
    builder = MeshBuilder(face_color=settings.face_color)
    cache = EdgeVertexCache(isovalue, builder)

    corner_flat = [dx * n * n + dy * n + dz for dx, dy, dz in case_table.corner_offsets]
    edge_endpoints = case_table.edge_endpoints

    def grid_position(flat: int) -> np.ndarray:
        return origin + np.array(field.grid_point(flat), dtype=np.float64) * cell_size

    active_cubes = 0
    for cube in walker.active_cubes():
        active_cubes += 1
        base = field.flat_index(cube.i, cube.j, cube.k)

        for triangle in case_table.triangles_for(cube.configuration):
            handles = []
            for edge in triangle:
                corner_a, corner_b = edge_endpoints[edge]
                key = make_edge_key(base + corner_flat[corner_a], base + corner_flat[corner_b])
                low, high = key
                handles.append(cache.resolve(
                    key,
                    values[low],
                    values[high],
                    grid_position(low),
                    grid_position(high),
                ))
            # Table winding faces the inside corners; reverse it so normals
            # point toward decreasing field values
            builder.add_triangle(handles[0], handles[2], handles[1])

    mesh = builder.finalize(isovalue)
    elapsed_ms = (time.perf_counter() - start_time) * 1000

    stats = ReconstructionStats(
        cubes_scanned=field.cube_count,
        active_cubes=active_cubes,
        vertex_count=builder.vertex_count,
        face_count=builder.face_count,
        cache_hits=cache.hits,
        degenerate_edges=cache.degenerate_edges,
        clamped_edges=cache.clamped_edges,
        elapsed_ms=elapsed_ms,
    )

    if mesh is None:
        logger.info(f"No surface at isovalue {isovalue:.4g} ({elapsed_ms:.0f}ms)")
        return ReconstructionResult(
            status=ReconstructionStatus.NO_SURFACE,
            mesh=None,
            isovalue=float(isovalue),
            stats=stats
        )

    logger.info(
        f"Isosurface at {isovalue:.4g}: {stats.vertex_count} vertices, "
        f"{stats.face_count} faces from {active_cubes} active cubes ({elapsed_ms:.0f}ms)"
    )
    if stats.degenerate_edges:
        logger.warning(f"{stats.degenerate_edges} degenerate edges used the midpoint fallback")

    return ReconstructionResult(
        status=ReconstructionStatus.MESH_READY,
        mesh=mesh,
        isovalue=float(isovalue),
        stats=stats
    )


class SessionState(Enum):
    """Lifecycle of an IsosurfaceSession."""
    UNLOADED = "unloaded"
    FIELD_LOADED = "field loaded"
    RECONSTRUCTING = "reconstructing"
    MESH_READY = "mesh ready"


class SessionStateError(RuntimeError):
    """An operation was requested in a state that does not allow it."""


class IsosurfaceSession:
    """
    Owns the current field, isovalue and extracted surface.

    Changing the isovalue discards the current mesh. Loading a volume
    replaces the field and reconstructs at the current isovalue. A failed
    load leaves the previous field and mesh in place.
    """

    def __init__(self,
                 isovalue: float = DEFAULT_ISOVALUE,
                 case_table: CaseTable = STANDARD_CASE_TABLE,
                 settings: Optional[ReconstructionSettings] = None):
        self.case_table = case_table
        self.settings = settings or ReconstructionSettings()
        self._isovalue = float(isovalue)
        self._field: Optional[ScalarField] = None
        self._result: Optional[ReconstructionResult] = None
        self._state = SessionState.UNLOADED
        self._volume_names: List[str] = []
        self._loader = VolumeLoader()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def isovalue(self) -> float:
        return self._isovalue

    @property
    def field(self) -> Optional[ScalarField]:
        return self._field

    @property
    def last_result(self) -> Optional[ReconstructionResult]:
        return self._result

    @property
    def mesh(self) -> Optional[IsosurfaceMesh]:
        """The current surface, or None if there is none."""
        return None if self._result is None else self._result.mesh

    @property
    def volume_names(self) -> Sequence[str]:
        """Names of all volumes successfully loaded, oldest first."""
        return tuple(self._volume_names)

    def _discard_mesh(self) -> None:
        self._result = None
        if self._field is not None:
            self._state = SessionState.FIELD_LOADED

    def set_isovalue(self, value: float) -> None:
        """Set the absolute isovalue and discard the current mesh."""
        self._isovalue = float(value)
        self._discard_mesh()
        logger.debug(f"Isovalue set to {self._isovalue:.4g}")

    def set_relative_isovalue(self, fraction: float) -> float:
        """
        Set the isovalue at a fraction of the loaded field's value range.

        Returns:
            The resulting absolute isovalue
        """
        if self._field is None:
            raise SessionStateError("No field loaded; cannot derive a relative isovalue")
        value = self._field.level_at(fraction)
        self.set_isovalue(value)
        return value

    def load_field(self, field: ScalarField) -> None:
        """Install an in-memory field, replacing the current one."""
        self._field = field
        self._discard_mesh()
        self._state = SessionState.FIELD_LOADED

    def load_volume(self, file_path: str) -> VolumeLoadResult:
        """
        Load a volume file and reconstruct its surface.

        Returns:
            VolumeLoadResult; on success triangle_count holds the number of
            triangles extracted at the current isovalue
        """
        result = self._loader.load(file_path)
        if not result.success:
            return result

        self.load_field(result.field)
        self._volume_names.append(result.file_name)
        result.triangle_count = self.reconstruct().triangle_count
        return result

    def reconstruct(self) -> ReconstructionResult:
        """
        Extract the surface of the current field at the current isovalue.

        Raises:
            SessionStateError: if no field is loaded
        """
        if self._field is None:
            raise SessionStateError("No field loaded; load a volume before reconstructing")

        self._result = None
        self._state = SessionState.RECONSTRUCTING
        try:
            result = reconstruct_isosurface(
                self._field,
                self._isovalue,
                case_table=self.case_table,
                settings=self.settings
            )
        except Exception:
            self._state = SessionState.FIELD_LOADED
            raise

        self._result = result
        self._state = SessionState.MESH_READY
        return result
