from match3.ui.layout import BoardGeometry, compute_board_geometry


def test_row_zero_is_top_of_board():
    geometry = BoardGeometry(rows=4, cols=5, tile_size=10, start_x=100, start_y=50)
    assert geometry.cell_at(101, 89) == (0, 0)
    assert geometry.cell_at(101, 51) == (3, 0)
    assert geometry.cell_at(149, 51) == (3, 4)


def test_points_outside_board_map_to_nothing():
    geometry = BoardGeometry(rows=4, cols=5, tile_size=10, start_x=100, start_y=50)
    assert geometry.cell_at(99, 60) is None
    assert geometry.cell_at(150, 60) is None
    assert geometry.cell_at(120, 49) is None
    assert geometry.cell_at(120, 90) is None


def test_cell_center_maps_back_to_cell():
    geometry = BoardGeometry(rows=6, cols=7, tile_size=32, start_x=15, start_y=40)
    for row in range(6):
        for col in range(7):
            assert geometry.cell_at(*geometry.cell_center(row, col)) == (row, col)


def test_compute_board_geometry_fits_and_centres():
    geometry = compute_board_geometry(800, 600, 8, 8)
    assert geometry.tile_size == 67
    assert geometry.width <= 800 and geometry.height <= 600
    assert geometry.start_x == (800 - geometry.width) / 2
    assert geometry.start_y == (600 - geometry.height) / 2
