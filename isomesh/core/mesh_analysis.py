"""
Surface Analysis Module

Diagnostics for an extracted isosurface, computed through trimesh.

Analyzes:
- Vertex, face and edge counts
- Boundary edges and watertightness
- Euler number
- Surface area and bounding box
- Zero-area faces and coincident vertices
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
from trimesh import grouping

from isomesh.core.mesh_builder import IsosurfaceMesh


@dataclass
class BoundingBox:
    """3D bounding box representation."""
    min_point: np.ndarray  # [x, y, z]
    max_point: np.ndarray  # [x, y, z]

    @property
    def size(self) -> np.ndarray:
        """Get the size (dimensions) of the bounding box."""
        return self.max_point - self.min_point

    @property
    def center(self) -> np.ndarray:
        """Get the center point of the bounding box."""
        return (self.min_point + self.max_point) / 2

    def __str__(self) -> str:
        size = self.size
        return f"Size: {size[0]:.3f} x {size[1]:.3f} x {size[2]:.3f}"


@dataclass
class SurfaceDiagnostics:
    """Diagnostics of one isosurface mesh."""
    vertex_count: int
    face_count: int
    edge_count: int
    boundary_edge_count: int
    is_watertight: bool
    euler_number: int
    surface_area: float
    bounding_box: BoundingBox
    isovalue: float
    zero_area_face_count: int = 0
    coincident_vertex_count: int = 0
    issues: List[str] = field(default_factory=list)

    def format(self) -> str:
        """Format diagnostics for display."""
        lines = [
            f"Isovalue: {self.isovalue:.6g}",
            f"Vertices: {self.vertex_count:,}",
            f"Faces: {self.face_count:,}",
            f"Edges: {self.edge_count:,}",
            "",
            f"Watertight: {'✓ Yes' if self.is_watertight else '✗ No'}",
            f"Boundary Edges: {self.boundary_edge_count:,}",
            f"Euler Number: {self.euler_number}",
            "",
            f"Surface Area: {self.surface_area:,.4f}",
            f"Bounding Box: {self.bounding_box}",
        ]

        if self.issues:
            lines.append("")
            lines.append("Issues:")
            for issue in self.issues:
                lines.append(f"  • {issue}")

        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert diagnostics to dictionary."""
        return {
            'isovalue': self.isovalue,
            'vertex_count': self.vertex_count,
            'face_count': self.face_count,
            'edge_count': self.edge_count,
            'boundary_edge_count': self.boundary_edge_count,
            'is_watertight': self.is_watertight,
            'euler_number': self.euler_number,
            'surface_area': self.surface_area,
            'bounding_box': {
                'min': self.bounding_box.min_point.tolist(),
                'max': self.bounding_box.max_point.tolist(),
                'size': self.bounding_box.size.tolist(),
            },
            'zero_area_face_count': self.zero_area_face_count,
            'coincident_vertex_count': self.coincident_vertex_count,
            'issues': self.issues,
        }


class SurfaceAnalyzer:
    """
    Isosurface analysis and diagnostics.
    """

    def __init__(self, surface: IsosurfaceMesh):
        """
        Initialize analyzer with an extracted surface.

        Args:
            surface: The isosurface to analyze
        """
        self.surface = surface
        self.mesh = surface.to_trimesh()
        self._diagnostics: Optional[SurfaceDiagnostics] = None

    def analyze(self) -> SurfaceDiagnostics:
        """
        Perform surface analysis.

        Returns:
            SurfaceDiagnostics containing all analysis results
        """
        mesh = self.mesh
        issues: List[str] = []

        bounds = mesh.bounds
        bounding_box = BoundingBox(
            min_point=bounds[0].copy(),
            max_point=bounds[1].copy()
        )

        # Edges used by exactly one face lie on the surface boundary
        boundary_edges = grouping.group_rows(mesh.edges_sorted, require_count=1)
        boundary_edge_count = len(boundary_edges)

        is_watertight = bool(mesh.is_watertight)
        if not is_watertight:
            issues.append(
                f"Surface is open ({boundary_edge_count} boundary edges); "
                "it may be clipped by the volume bounds"
            )

        zero_area_face_count = int(np.sum(mesh.area_faces < 1e-12))
        if zero_area_face_count:
            issues.append(
                f"Found {zero_area_face_count} zero-area faces (samples equal to the isovalue)"
            )

        unique_positions = np.unique(mesh.vertices, axis=0)
        coincident_vertex_count = len(mesh.vertices) - len(unique_positions)
        if coincident_vertex_count:
            issues.append(f"Found {coincident_vertex_count} vertices sharing a position")

        self._diagnostics = SurfaceDiagnostics(
            vertex_count=len(mesh.vertices),
            face_count=len(mesh.faces),
            edge_count=len(mesh.edges_unique),
            boundary_edge_count=boundary_edge_count,
            is_watertight=is_watertight,
            euler_number=int(mesh.euler_number),
            surface_area=float(mesh.area),
            bounding_box=bounding_box,
            isovalue=self.surface.isovalue,
            zero_area_face_count=zero_area_face_count,
            coincident_vertex_count=coincident_vertex_count,
            issues=issues
        )

        return self._diagnostics

    @property
    def diagnostics(self) -> Optional[SurfaceDiagnostics]:
        """Get cached diagnostics (call analyze() first)."""
        return self._diagnostics


def analyze_surface(surface: IsosurfaceMesh) -> SurfaceDiagnostics:
    """
    Convenience function to analyze an isosurface.

    Args:
        surface: The isosurface to analyze

    Returns:
        SurfaceDiagnostics containing all analysis results
    """
    analyzer = SurfaceAnalyzer(surface)
    return analyzer.analyze()
