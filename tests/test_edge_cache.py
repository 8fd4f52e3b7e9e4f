import logging

import numpy as np
import pytest

from isomesh.core import EdgeVertexCache, MeshBuilder, interpolate_edge, make_edge_key


def test_edge_key_is_order_independent():
    assert make_edge_key(4, 13) == (4, 13)
    assert make_edge_key(13, 4) == (4, 13)


def test_edge_key_requires_two_points():
    with pytest.raises(ValueError):
        make_edge_key(3, 3)


def test_interpolation_places_crossing_on_segment():
    result = interpolate_edge(0.5, 0.0, 2.0, [0, 0, 0], [0, 0, 4])

    assert result.alpha == pytest.approx(0.25)
    np.testing.assert_allclose(result.position, [0, 0, 1])
    assert not result.degenerate
    assert not result.clamped


def test_flat_edge_falls_back_to_midpoint():
    result = interpolate_edge(0.5, 0.5, 0.5, [0, 0, 0], [2, 0, 0])

    assert result.degenerate
    assert result.alpha == 0.5
    np.testing.assert_allclose(result.position, [1, 0, 0])
    assert np.all(np.isfinite(result.position))


def test_out_of_segment_crossing_is_clamped():
    result = interpolate_edge(3.0, 0.0, 1.0, [0, 0, 0], [1, 0, 0])

    assert result.clamped
    assert result.alpha == 1.0
    np.testing.assert_allclose(result.position, [1, 0, 0])


def test_cache_reuses_vertex_for_same_key():
    builder = MeshBuilder()
    cache = EdgeVertexCache(0.5, builder)
    key = make_edge_key(0, 1)

    first = cache.resolve(key, 0.0, 1.0, [0, 0, 0], [1, 0, 0])
    second = cache.resolve(key, 0.0, 1.0, [0, 0, 0], [1, 0, 0])

    assert first == second
    assert builder.vertex_count == 1
    assert cache.hits == 1
    assert len(cache) == 1
    assert key in cache
    assert cache.get(key) == first


def test_cache_creates_vertex_per_distinct_edge():
    builder = MeshBuilder()
    cache = EdgeVertexCache(0.5, builder)

    a = cache.resolve(make_edge_key(0, 1), 0.0, 1.0, [0, 0, 0], [1, 0, 0])
    b = cache.resolve(make_edge_key(0, 2), 0.0, 1.0, [0, 0, 0], [0, 1, 0])

    assert a != b
    assert builder.vertex_count == 2
    assert cache.hits == 0
    assert cache.get(make_edge_key(5, 6)) is None


def test_cache_counts_degenerate_edges(caplog):
    cache = EdgeVertexCache(0.5, MeshBuilder())
    with caplog.at_level(logging.WARNING):
        cache.resolve(make_edge_key(0, 1), 0.5, 0.5, [0, 0, 0], [1, 0, 0])

    assert cache.degenerate_edges == 1
    assert "Degenerate edge" in caplog.text
