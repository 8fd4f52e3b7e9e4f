import numpy as np

from isomesh.core import ReconstructionSettings, SurfaceAnalyzer, analyze_surface, reconstruct_isosurface

UNIT_CELLS = ReconstructionSettings(cell_size=1.0)


def test_sphere_diagnostics(sphere_field):
    mesh = reconstruct_isosurface(sphere_field, 0.0, settings=UNIT_CELLS).mesh
    diagnostics = analyze_surface(mesh)

    assert diagnostics.vertex_count == mesh.vertex_count
    assert diagnostics.face_count == mesh.face_count
    assert diagnostics.is_watertight
    assert diagnostics.boundary_edge_count == 0
    assert diagnostics.euler_number == 2
    assert diagnostics.coincident_vertex_count == 0
    assert diagnostics.zero_area_face_count == 0
    assert diagnostics.issues == []
    assert diagnostics.surface_area > 0
    np.testing.assert_allclose(diagnostics.bounding_box.center, [7.5, 7.5, 7.5], atol=0.1)


def test_open_quad_reports_boundary(two_layer_field):
    mesh = reconstruct_isosurface(two_layer_field, 0.5, settings=UNIT_CELLS).mesh
    analyzer = SurfaceAnalyzer(mesh)
    diagnostics = analyzer.analyze()

    assert analyzer.diagnostics is diagnostics
    assert not diagnostics.is_watertight
    assert diagnostics.edge_count == 5
    assert diagnostics.boundary_edge_count == 4
    assert diagnostics.euler_number == 1
    assert diagnostics.surface_area == 1.0
    assert any("open" in issue for issue in diagnostics.issues)


def test_report_and_dict(two_layer_field):
    mesh = reconstruct_isosurface(two_layer_field, 0.5, settings=UNIT_CELLS).mesh
    diagnostics = analyze_surface(mesh)

    text = diagnostics.format()
    assert "Faces: 2" in text
    assert "Issues:" in text

    data = diagnostics.to_dict()
    assert data['face_count'] == 2
    assert data['isovalue'] == 0.5
    assert data['bounding_box']['size'] == [0.0, 1.0, 1.0]
