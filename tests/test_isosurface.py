import logging

import numpy as np
import pytest

from isomesh.core import (
    CaseTable,
    DegenerateTriangleError,
    ReconstructionSettings,
    ReconstructionStatus,
    ScalarField,
    reconstruct_isosurface,
)
from isomesh.core.mc_tables import TRI_TABLE

from conftest import SPHERE_CENTER, SPHERE_RADIUS

UNIT_CELLS = ReconstructionSettings(cell_size=1.0)


def test_two_layer_field_gives_single_quad(two_layer_field):
    result = reconstruct_isosurface(two_layer_field, 0.5, settings=UNIT_CELLS)
    mesh = result.mesh

    assert result.status == ReconstructionStatus.MESH_READY
    assert mesh.face_count == 2
    assert mesh.vertex_count == 4
    assert len(np.unique(mesh.faces)) == 4
    # Plane halfway between the two layers
    np.testing.assert_allclose(mesh.vertices[:, 0], 0.5)
    # Normals point from the high layer toward the low one
    np.testing.assert_allclose(mesh.face_normals, np.tile([-1.0, 0.0, 0.0], (2, 1)), atol=1e-12)


def test_uniform_field_has_no_surface():
    result = reconstruct_isosurface(ScalarField(2, np.zeros(8)), 0.5)

    assert result.status == ReconstructionStatus.NO_SURFACE
    assert result.is_empty
    assert result.mesh is None
    assert result.triangle_count == 0
    assert result.stats.cubes_scanned == 1
    assert result.stats.active_cubes == 0


@pytest.mark.parametrize("isovalue", [-10.0, 10.0])
def test_isovalue_outside_value_range_has_no_surface(sphere_field, isovalue):
    assert reconstruct_isosurface(sphere_field, isovalue).is_empty


def test_default_cell_size_fits_unit_cube(two_layer_field):
    mesh = reconstruct_isosurface(two_layer_field, 0.5).mesh
    np.testing.assert_allclose(mesh.vertices[:, 0], 0.25)
    assert mesh.vertices.max() <= 0.5


def test_origin_offsets_vertices(two_layer_field):
    settings = ReconstructionSettings(cell_size=2.0, origin=(10.0, 0.0, -1.0))
    mesh = reconstruct_isosurface(two_layer_field, 0.5, settings=settings).mesh

    np.testing.assert_allclose(mesh.vertices[:, 0], 11.0)
    assert set(np.round(mesh.vertices[:, 2], 9)) == {-1.0, 1.0}


def test_invalid_cell_size_rejected(two_layer_field):
    with pytest.raises(ValueError):
        reconstruct_isosurface(two_layer_field, 0.5, settings=ReconstructionSettings(cell_size=0.0))


def test_shared_edges_produce_one_vertex(sphere_field):
    result = reconstruct_isosurface(sphere_field, 0.0, settings=UNIT_CELLS)
    mesh = result.mesh

    unique_positions = np.unique(np.round(mesh.vertices, 9), axis=0)
    assert len(unique_positions) == mesh.vertex_count
    assert result.stats.cache_hits > 0
    assert result.stats.vertex_count == mesh.vertex_count


def test_vertices_lie_on_grid_edges_at_isovalue(sphere_field):
    isovalue = 0.0
    mesh = reconstruct_isosurface(sphere_field, isovalue, settings=UNIT_CELLS).mesh

    for position in mesh.vertices:
        fractional = np.abs(position - np.round(position)) > 1e-9
        assert fractional.sum() == 1
        axis = int(np.argmax(fractional))

        low = np.round(position).astype(int)
        low[axis] = int(np.floor(position[axis]))
        high = low.copy()
        high[axis] += 1

        alpha = position[axis] - low[axis]
        v0 = sphere_field.sample(*low)
        v1 = sphere_field.sample(*high)
        assert v0 + alpha * (v1 - v0) == pytest.approx(isovalue, abs=1e-9)


def test_sphere_is_closed_and_outward_facing(sphere_field):
    mesh = reconstruct_isosurface(sphere_field, 0.0, settings=UNIT_CELLS).mesh
    surface = mesh.to_trimesh()

    assert surface.is_watertight
    assert surface.is_winding_consistent
    assert surface.euler_number == 2

    expected = 4.0 / 3.0 * np.pi * SPHERE_RADIUS ** 3
    assert surface.volume > 0
    assert surface.volume == pytest.approx(expected, rel=0.1)

    # Vertex normals point away from the center
    outward = mesh.vertices - SPHERE_CENTER
    assert np.all(np.einsum('ij,ij->i', outward, mesh.vertex_normals) > 0)


def test_reconstruction_is_idempotent(sphere_field):
    first = reconstruct_isosurface(sphere_field, 0.0)
    second = reconstruct_isosurface(sphere_field, 0.0)

    assert first.mesh is not second.mesh
    assert first.mesh.vertex_count == second.mesh.vertex_count
    assert first.mesh.face_count == second.mesh.face_count
    np.testing.assert_array_equal(first.mesh.vertices, second.mesh.vertices)
    np.testing.assert_array_equal(first.mesh.faces, second.mesh.faces)


def test_rerun_leaves_previous_mesh_untouched(sphere_field):
    first = reconstruct_isosurface(sphere_field, 0.0).mesh
    snapshot = first.vertices.copy()

    reconstruct_isosurface(sphere_field, 2.0)

    np.testing.assert_array_equal(first.vertices, snapshot)


def test_injected_case_table_is_used(two_layer_field):
    empty_table = CaseTable([[] for _ in range(256)])
    assert reconstruct_isosurface(two_layer_field, 0.5, case_table=empty_table).is_empty


def test_flat_edges_use_midpoint_fallback(two_layer_field, caplog):
    rows = [list(row) for row in TRI_TABLE]
    # Edges 1 and 3 do not cross the surface for configuration 102
    rows[102] = [0, 1, 3]
    with caplog.at_level(logging.WARNING):
        result = reconstruct_isosurface(
            two_layer_field, 0.5, case_table=CaseTable(rows), settings=UNIT_CELLS
        )

    assert result.stats.degenerate_edges == 2
    assert result.mesh.face_count == 1
    assert np.all(np.isfinite(result.mesh.vertices))
    assert "midpoint" in caplog.text


def test_degenerate_triangle_is_an_error(two_layer_field):
    rows = [list(row) for row in TRI_TABLE]
    rows[102] = [0, 0, 2]
    with pytest.raises(DegenerateTriangleError):
        reconstruct_isosurface(two_layer_field, 0.5, case_table=CaseTable(rows))
