import numpy as np
import pytest

from c4online.errors import OutOfBounds
from c4online.game.grid import Grid
from conftest import grid_rows


def test_empty_grid_dimensions():
    grid = Grid.empty(6, 7)
    assert grid.row_count == 6
    assert grid.column_count == 7
    assert grid.shape == (6, 7)
    assert grid.occupied_count() == 0
    assert not grid.is_full()


def test_cell_at_reads_column_then_row():
    grid = Grid.from_rows(grid_rows(pieces={(3, 5): 0, (3, 4): 1}))
    assert grid.cell_at(3, 5) == 0
    assert grid.cell_at(3, 4) == 1
    assert grid.cell_at(4, 5) == -1
    assert grid.is_empty(0, 0)
    assert not grid.is_empty(3, 5)


@pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (7, 0), (0, 6), (7, 6), (100, -100)])
def test_cell_at_out_of_bounds(x, y):
    grid = Grid.empty(6, 7)
    with pytest.raises(OutOfBounds):
        grid.cell_at(x, y)


def test_out_of_bounds_is_an_index_error():
    with pytest.raises(IndexError):
        Grid.empty(2, 2).cell_at(2, 0)


def test_linear_placement_index_is_row_major():
    grid = Grid.empty(6, 7)
    assert grid.linear_placement_index(0, 0) == 0
    assert grid.linear_placement_index(6, 0) == 6
    assert grid.linear_placement_index(0, 1) == 7
    assert grid.linear_placement_index(3, 5) == 38


@pytest.mark.parametrize("rows, cols", [(6, 7), (1, 1), (3, 9), (8, 2)])
def test_placement_index_decodes_back(rows, cols):
    grid = Grid.empty(rows, cols)
    for y in range(rows):
        for x in range(cols):
            p = grid.linear_placement_index(x, y)
            assert (p % cols, p // cols) == (x, y)
            assert grid.decode_placement_index(p) == (x, y)


def test_decode_rejects_indexes_off_the_board():
    grid = Grid.empty(6, 7)
    with pytest.raises(OutOfBounds):
        grid.decode_placement_index(42)
    with pytest.raises(OutOfBounds):
        grid.decode_placement_index(-1)


def test_linear_placement_index_rejects_bad_coordinates():
    with pytest.raises(OutOfBounds):
        Grid.empty(6, 7).linear_placement_index(7, 0)


def test_grid_cannot_be_modified():
    grid = Grid.empty(6, 7)
    with pytest.raises(ValueError):
        grid.to_array()[0, 0] = 1


def test_grid_copies_its_input():
    cells = np.full((2, 3), -1)
    grid = Grid(cells)
    cells[0, 0] = 1
    assert grid.cell_at(0, 0) == -1


@pytest.mark.parametrize("rows", [
    [],
    [[]],
    [[-1, -1], [-1]],
    [[-1, "x"]],
    [[-1, True]],
    [[-1, 1.5]],
    [[-2, -1]],
    [[-1, 2 ** 70]],
    "not a grid",
    [-1, -1],
])
def test_from_rows_rejects_bad_shapes(rows):
    with pytest.raises(ValueError):
        Grid.from_rows(rows)


def test_landing_row():
    grid = Grid.from_rows(grid_rows(rows=3, cols=2, pieces={(0, 2): 0, (0, 1): 1, (0, 0): 0, (1, 2): 1}))
    assert grid.landing_row(0) is None
    assert grid.landing_row(1) == 1
    with pytest.raises(OutOfBounds):
        grid.landing_row(2)


def test_equality_and_round_trip_to_rows():
    rows = grid_rows(pieces={(0, 5): 1})
    assert Grid.from_rows(rows) == Grid.from_rows(rows)
    assert Grid.from_rows(rows) != Grid.empty()
    assert Grid.from_rows(rows).to_rows() == rows


def test_render_draws_pieces_and_column_numbers():
    grid = Grid.from_rows(grid_rows(rows=2, cols=3, pieces={(1, 1): 0, (2, 1): 1}))
    text = grid.render()
    lines = text.splitlines()
    assert lines[1] == "|. . .|"
    assert lines[2] == "|. R Y|"
    assert lines[-1] == "|0 1 2|"


def test_render_marks_hover_and_pending_cells():
    grid = Grid.empty(2, 3)
    text = grid.render(hover_color=0, hover_cells=[(0, 1), (1, 1)], pending=(2, 1, 1))
    assert text.splitlines()[2] == "|r r Y|"
