import pytest

from isomesh.core import STANDARD_CASE_TABLE, CaseTable, CaseTableError
from isomesh.core.mc_tables import CORNER_OFFSETS, EDGE_ENDPOINTS, TRI_TABLE


def edges_used(table, configuration):
    return {edge for triangle in table.triangles_for(configuration) for edge in triangle}


def test_trivial_configurations_have_no_triangles():
    assert STANDARD_CASE_TABLE.triangles_for(0) == ()
    assert STANDARD_CASE_TABLE.triangles_for(255) == ()


def test_single_corner_configuration_is_one_triangle():
    assert STANDARD_CASE_TABLE.triangles_for(1) == ((0, 8, 3),)
    assert STANDARD_CASE_TABLE.triangle_count(1) == 1


def test_every_configuration_is_triangulated_with_valid_edges():
    for configuration in range(1, 255):
        triangles = STANDARD_CASE_TABLE.triangles_for(configuration)
        assert 1 <= len(triangles) <= 5
        for triangle in triangles:
            assert len(triangle) == 3
            assert all(0 <= edge < 12 for edge in triangle)


def test_only_edges_crossing_the_surface_are_used():
    endpoints = STANDARD_CASE_TABLE.edge_endpoints
    for configuration in range(256):
        for edge in edges_used(STANDARD_CASE_TABLE, configuration):
            a, b = endpoints[edge]
            inside_a = bool(configuration >> a & 1)
            inside_b = bool(configuration >> b & 1)
            assert inside_a != inside_b, (configuration, edge)


def test_complementary_configurations_cut_the_same_edges():
    for configuration in range(256):
        assert edges_used(STANDARD_CASE_TABLE, configuration) == \
            edges_used(STANDARD_CASE_TABLE, 255 - configuration)


def test_edges_join_adjacent_corners():
    offsets = STANDARD_CASE_TABLE.corner_offsets
    for a, b in STANDARD_CASE_TABLE.edge_endpoints:
        distance = sum(abs(p - q) for p, q in zip(offsets[a], offsets[b]))
        assert distance == 1


def test_configuration_out_of_range():
    with pytest.raises(IndexError):
        STANDARD_CASE_TABLE.triangles_for(256)
    with pytest.raises(IndexError):
        STANDARD_CASE_TABLE.triangles_for(-1)


def test_rows_without_padding_are_accepted():
    rows = [[] for _ in range(256)]
    rows[3] = [1, 8, 3, 9, 8, 1]
    table = CaseTable(rows)

    assert table.triangles_for(3) == ((1, 8, 3), (9, 8, 1))
    assert table.triangles_for(4) == ()


def test_wrong_row_count_rejected():
    with pytest.raises(CaseTableError):
        CaseTable(TRI_TABLE[:255])


def test_partial_triangle_rejected():
    rows = [list(row) for row in TRI_TABLE]
    rows[1] = [0, 8, -1]
    with pytest.raises(CaseTableError, match="multiple of 3"):
        CaseTable(rows)


def test_edge_index_out_of_range_rejected():
    rows = [list(row) for row in TRI_TABLE]
    rows[1] = [0, 8, 12]
    with pytest.raises(CaseTableError, match="out of range"):
        CaseTable(rows)


def test_bad_auxiliary_tables_rejected():
    with pytest.raises(CaseTableError):
        CaseTable(TRI_TABLE, edge_endpoints=EDGE_ENDPOINTS[:11])
    with pytest.raises(CaseTableError):
        CaseTable(TRI_TABLE, edge_endpoints=((0, 0),) + EDGE_ENDPOINTS[1:])
    with pytest.raises(CaseTableError):
        CaseTable(TRI_TABLE, corner_offsets=((0, 0, 2),) + CORNER_OFFSETS[1:])
    with pytest.raises(CaseTableError):
        CaseTable(TRI_TABLE, corner_offsets=((1, 0, 0),) + CORNER_OFFSETS[1:])
