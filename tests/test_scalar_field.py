import numpy as np
import pytest

from isomesh.core import GridIndexError, ScalarField


def test_flat_index_is_row_major_with_i_slowest():
    field = ScalarField(3, np.arange(27))

    assert field.flat_index(0, 0, 0) == 0
    assert field.flat_index(0, 0, 1) == 1
    assert field.flat_index(0, 1, 0) == 3
    assert field.flat_index(1, 0, 0) == 9
    assert field.flat_index(2, 2, 2) == 26
    assert field.sample(1, 2, 0) == 15.0


def test_grid_point_inverts_flat_index():
    field = ScalarField(4, np.zeros(64))
    for flat in (0, 5, 17, 63):
        assert field.flat_index(*field.grid_point(flat)) == flat


def test_value_range_is_cached():
    field = ScalarField(2, [3, -1, 4, 1, 5, 9, 2, 6])

    assert field.min_value == -1.0
    assert field.max_value == 9.0
    assert field.value_range == 10.0
    assert field.cube_count == 1


@pytest.mark.parametrize("index", [(-1, 0, 0), (0, 2, 0), (0, 0, 5)])
def test_out_of_range_sample_raises(index):
    field = ScalarField(2, np.zeros(8))
    with pytest.raises(GridIndexError):
        field.sample(*index)


def test_grid_point_out_of_range_raises():
    field = ScalarField(2, np.zeros(8))
    with pytest.raises(GridIndexError):
        field.grid_point(8)


def test_level_at_interpolates_value_range():
    field = ScalarField(2, [0, 0, 0, 0, 10, 10, 10, 10])

    assert field.level_at(0.0) == 0.0
    assert field.level_at(0.25) == 2.5
    assert field.level_at(1.0) == 10.0


def test_from_array_matches_flat_layout():
    array = np.arange(8, dtype=float).reshape(2, 2, 2)
    field = ScalarField.from_array(array)

    assert field.size == 2
    assert field.sample(1, 0, 1) == array[1, 0, 1]
    np.testing.assert_array_equal(field.as_array(), array)


def test_from_array_rejects_non_cubic():
    with pytest.raises(ValueError):
        ScalarField.from_array(np.zeros((2, 3, 2)))


def test_invalid_sizes_rejected():
    with pytest.raises(ValueError):
        ScalarField(1, [0.0])
    with pytest.raises(ValueError):
        ScalarField(2, np.zeros(7))


def test_samples_are_read_only():
    field = ScalarField(2, np.zeros(8))
    with pytest.raises(ValueError):
        field.values[0] = 1.0
