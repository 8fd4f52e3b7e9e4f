# Core module for isosurface extraction
from isomesh.core.scalar_field import ScalarField, GridIndexError
from isomesh.core.volume_loader import (
    VolumeLoader,
    load_volume_file,
    parse_volume,
    read_volume,
    VolumeLoadResult,
    LoadErrorKind,
    VolumeError,
    VolumeFileNotFoundError,
    MalformedVolumeError,
)
from isomesh.core.case_table import CaseTable, CaseTableError, STANDARD_CASE_TABLE
from isomesh.core.voxel_walker import VoxelWalker, CubeCase
from isomesh.core.edge_cache import (
    EdgeVertexCache,
    make_edge_key,
    interpolate_edge,
    EdgeInterpolation,
)
from isomesh.core.mesh_builder import (
    MeshBuilder,
    IsosurfaceMesh,
    ColorMode,
    DegenerateTriangleError,
    SURFACE_COLOR,
)
from isomesh.core.mesh_analysis import SurfaceAnalyzer, SurfaceDiagnostics, analyze_surface
from isomesh.core.isosurface import (
    reconstruct_isosurface,
    IsosurfaceSession,
    ReconstructionSettings,
    ReconstructionResult,
    ReconstructionStats,
    ReconstructionStatus,
    SessionState,
    SessionStateError,
    DEFAULT_ISOVALUE,
)

__all__ = [
    'ScalarField',
    'GridIndexError',
    # Volume loading
    'VolumeLoader',
    'load_volume_file',
    'parse_volume',
    'read_volume',
    'VolumeLoadResult',
    'LoadErrorKind',
    'VolumeError',
    'VolumeFileNotFoundError',
    'MalformedVolumeError',
    # Case table
    'CaseTable',
    'CaseTableError',
    'STANDARD_CASE_TABLE',
    # Voxel walk
    'VoxelWalker',
    'CubeCase',
    # Edge vertices
    'EdgeVertexCache',
    'make_edge_key',
    'interpolate_edge',
    'EdgeInterpolation',
    # Mesh building
    'MeshBuilder',
    'IsosurfaceMesh',
    'ColorMode',
    'DegenerateTriangleError',
    'SURFACE_COLOR',
    # Analysis
    'SurfaceAnalyzer',
    'SurfaceDiagnostics',
    'analyze_surface',
    # Reconstruction
    'reconstruct_isosurface',
    'IsosurfaceSession',
    'ReconstructionSettings',
    'ReconstructionResult',
    'ReconstructionStats',
    'ReconstructionStatus',
    'SessionState',
    'SessionStateError',
    'DEFAULT_ISOVALUE',
]
