"""
Mesh Builder Module

Accumulates the vertices and triangles produced by the reconstruction and
turns them into an immutable IsosurfaceMesh:
1. Vertices are appended in first-visit order and addressed by integer handle
2. Each triangle gets the same flat surface color
3. Face and area-weighted vertex normals are computed once, after the scan
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
import trimesh

logger = logging.getLogger(__name__)

# Light blue, matching the default mesh color of the viewer (#00aaff)
SURFACE_COLOR = (0.0, 0.667, 1.0)


class ColorMode(Enum):
    """How a mesh carries color information for the renderer."""
    NONE = "none"
    VERTEX_COLORS = "vertex colors"
    FACE_COLORS = "face colors"


class DegenerateTriangleError(ValueError):
    """A triangle references fewer than three distinct vertices."""


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class IsosurfaceMesh:
    """
    Finished isosurface, handed to the rendering side.

    All arrays are read-only.
    """
    vertices: np.ndarray        # (V, 3) float64 positions
    faces: np.ndarray           # (F, 3) int64 vertex indices
    face_colors: np.ndarray     # (F, 3) float RGB in [0, 1]
    face_normals: np.ndarray    # (F, 3) unit normals
    vertex_normals: np.ndarray  # (V, 3) unit normals
    isovalue: float
    color_mode: ColorMode = ColorMode.FACE_COLORS

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def bounds(self) -> np.ndarray:
        """(2, 3) array of min and max corner."""
        return np.array([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def face_colors_rgba(self) -> np.ndarray:
        """Face colors as (F, 4) uint8 RGBA, fully opaque."""
        colors = np.zeros((self.face_count, 4), dtype=np.uint8)
        colors[:, :3] = np.round(self.face_colors * 255).astype(np.uint8)
        colors[:, 3] = 255
        return colors

    def to_trimesh(self) -> trimesh.Trimesh:
        """
        Convert to a trimesh mesh.

        Processing is disabled so vertex order and face order are preserved.
        """
        return trimesh.Trimesh(
            vertices=np.array(self.vertices),
            faces=np.array(self.faces),
            face_colors=self.face_colors_rgba(),
            process=False
        )


def compute_face_normals(vertices: np.ndarray, faces: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute unit face normals and face areas.

    Zero-area faces get a zero normal.

    Args:
        vertices: Nx3 array of vertex positions
        faces: Mx3 array of face vertex indices

    Returns:
        Tuple of (Mx3 unit normals, M areas)
    """
    v0 = vertices[faces[:, 0]]  # (F, 3)
    v1 = vertices[faces[:, 1]]  # (F, 3)
    v2 = vertices[faces[:, 2]]  # (F, 3)

    cross = np.cross(v1 - v0, v2 - v0)  # (F, 3)
    lengths = np.linalg.norm(cross, axis=1)  # (F,)
    areas = lengths / 2.0

    safe = np.where(lengths > 1e-12, lengths, 1.0)
    normals = np.where((lengths > 1e-12)[:, None], cross / safe[:, None], 0.0)
    return normals, areas


def compute_smooth_vertex_normals(vertices: np.ndarray,
                                  faces: np.ndarray,
                                  face_normals: np.ndarray,
                                  face_areas: np.ndarray) -> np.ndarray:
    """
    Compute area-weighted smooth vertex normals.

    Each vertex normal is the normalized sum of the normals of all faces
    that share that vertex, weighted by face area.

    Returns:
        Nx3 array of normalized vertex normals
    """
    weighted_normals = face_normals * face_areas[:, None]  # (F, 3)

    normal_accum = np.zeros((len(vertices), 3), dtype=np.float64)
    np.add.at(normal_accum, faces[:, 0], weighted_normals)
    np.add.at(normal_accum, faces[:, 1], weighted_normals)
    np.add.at(normal_accum, faces[:, 2], weighted_normals)

    norms = np.linalg.norm(normal_accum, axis=1, keepdims=True)
    norms = np.where(norms > 1e-12, norms, 1.0)
    return normal_accum / norms


class MeshBuilder:
    """
    Incremental isosurface mesh builder for a single reconstruction pass.

    finalize() may be called once; the builder rejects further edits after.
    """

    def __init__(self, face_color: Sequence[float] = SURFACE_COLOR):
        self.face_color = tuple(float(c) for c in face_color)
        if len(self.face_color) != 3 or not all(0.0 <= c <= 1.0 for c in self.face_color):
            raise ValueError(f"Face color must be RGB in [0, 1], got {face_color}")

        self._vertices: List[np.ndarray] = []
        self._faces: List[Tuple[int, int, int]] = []
        self._finalized = False

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def face_count(self) -> int:
        return len(self._faces)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def _check_open(self) -> None:
        if self._finalized:
            raise RuntimeError("MeshBuilder has already been finalized")

    def add_vertex(self, position: Sequence[float]) -> int:
        """Append a vertex and return its handle."""
        self._check_open()
        self._vertices.append(np.asarray(position, dtype=np.float64).reshape(3))
        return len(self._vertices) - 1

    def add_triangle(self, a: int, b: int, c: int) -> int:
        """
        Append a triangle over three existing vertex handles.

        Returns:
            Index of the new face

        Raises:
            DegenerateTriangleError: if the handles are not distinct
        """
        self._check_open()
        if a == b or b == c or a == c:
            raise DegenerateTriangleError(f"Triangle ({a}, {b}, {c}) repeats a vertex")

        count = len(self._vertices)
        for handle in (a, b, c):
            if not 0 <= handle < count:
                raise IndexError(f"Vertex handle {handle} outside [0, {count})")

        self._faces.append((a, b, c))
        return len(self._faces) - 1

    def finalize(self, isovalue: float) -> Optional[IsosurfaceMesh]:
        """
        Compute normals and freeze the mesh.

        Returns:
            The finished IsosurfaceMesh, or None if no faces were added
        """
        self._check_open()
        self._finalized = True

        if not self._faces:
            logger.debug("No faces accumulated; no surface to finalize")
            return None

        vertices = np.vstack(self._vertices)
        faces = np.array(self._faces, dtype=np.int64)

        face_normals, face_areas = compute_face_normals(vertices, faces)
        vertex_normals = compute_smooth_vertex_normals(vertices, faces, face_normals, face_areas)
        face_colors = np.tile(np.array(self.face_color, dtype=np.float64), (len(faces), 1))

        logger.debug(f"Finalized mesh: {len(vertices)} vertices, {len(faces)} faces")

        return IsosurfaceMesh(
            vertices=_read_only(vertices),
            faces=_read_only(faces),
            face_colors=_read_only(face_colors),
            face_normals=_read_only(face_normals),
            vertex_normals=_read_only(vertex_normals),
            isovalue=float(isovalue),
        )
