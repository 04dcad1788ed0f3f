''' Tests for the pixelmap.py module: the overlay of RGM pixels on VIC cells.
    See conftest.py for the layout of the test VIC cells.
'''

import numpy as np

import pytest

from overlay.pixelmap import PIXEL_MAP_COLUMNS, pixel_rows_cols,\
    build_pixel_map
from overlay.polygons import GeoPandasBackend

from conftest import make_raster

@pytest.fixture
def backend(cell_polygons):
    backend = GeoPandasBackend()
    backend.reproject(cell_polygons, cell_polygons.crs)
    return backend

@pytest.mark.parametrize(('ncols', 'nrows'), [(1, 1), (4, 4), (3, 5),
    (7, 2)])
@pytest.mark.parametrize('from_top', [True, False])
def test_pixel_rows_cols_inverse(ncols, nrows, from_top):
    pixels = np.arange(1, ncols * nrows + 1)
    rows, cols = pixel_rows_cols(pixels, ncols, nrows, from_top)
    assert rows.min() == 0 and rows.max() == nrows - 1
    assert cols.min() == 0 and cols.max() == ncols - 1
    storage_rows = (nrows - 1 - rows) if from_top else rows
    np.testing.assert_array_equal(storage_rows * ncols + cols + 1, pixels)

def test_row_direction_on_four_row_raster(backend):
    surface = make_raster(np.arange(16).reshape(4, 4) + 1000)
    top = build_pixel_map(surface, backend, from_top=True)
    storage = build_pixel_map(surface, backend, from_top=False)
    # storage row 0 holds pixels 1..4
    assert set(top.loc[top['PIXEL_ID'] <= 4, 'ROW']) == {3}
    assert set(storage.loc[storage['PIXEL_ID'] <= 4, 'ROW']) == {0}
    assert list(top.loc[top['ROW'] == 0, 'PIXEL_ID']) == [13, 14, 15, 16]

def test_build_pixel_map(backend):
    elevs = np.array([[1000, 1199.6, 1200, 1400.4],
                                        [999.5, 1000.5, 2600, 3000],
                                        [-1, 0, 199.9, 200],
                                        [np.nan, 50, 50, 50]])
    pixel_map = build_pixel_map(make_raster(elevs), backend, zref=0,
        deltaz=200, from_top=True)

    assert list(pixel_map.columns) == PIXEL_MAP_COLUMNS
    assert len(pixel_map) == 16
    assert sorted(pixel_map['PIXEL_ID']) == list(range(1, 17))
    # sorted by ROW then COL, no gaps
    assert list(pixel_map['ROW']) == [r for r in range(4) for _ in range(4)]
    assert list(pixel_map['COL']) == list(range(4)) * 4
    assert list(pixel_map.index) == list(range(16))

    top_row = pixel_map[pixel_map['ROW'] == 3]
    assert list(top_row['PIXEL_ID']) == [1, 2, 3, 4]
    assert list(top_row['BAND']) == [5, 5, 6, 7]
    assert list(top_row['ELEV']) == [1000, 1200, 1200, 1400]
    assert list(top_row['CELL_ID']) == [101, 101, 102, 102]

    second = pixel_map[pixel_map['ROW'] == 2]
    # rounding is half to even
    assert list(second['ELEV']) == [1000, 1000, 2600, 3000]
    assert list(second['BAND']) == [4, 5, 13, 15]

    third = pixel_map[pixel_map['ROW'] == 1]
    assert list(third['BAND']) == [-1, 0, 0, 1]
    assert list(third['CELL_ID']) == [201, 201, 202, 202]

    bottom = pixel_map[pixel_map['ROW'] == 0]
    assert bottom['BAND'].isna().tolist() == [True, False, False, False]
    assert bottom['ELEV'].isna().tolist() == [True, False, False, False]
    assert list(bottom['PIXEL_ID']) == [13, 14, 15, 16]

def test_build_pixel_map_reference_elevation(backend):
    surface = make_raster(np.full((4, 4), 1950.0))
    pixel_map = build_pixel_map(surface, backend, zref=1900, deltaz=100)
    assert set(pixel_map['BAND']) == {0}
    pixel_map = build_pixel_map(surface, backend, zref=2000, deltaz=100)
    assert set(pixel_map['BAND']) == {-1}

def test_build_pixel_map_outside_cells(backend):
    # 6x6 raster with a one pixel margin around the VIC cells
    surface = make_raster(np.full((6, 6), 1000.0), xmin=-100, ymax=500)
    pixel_map = build_pixel_map(surface, backend)
    assert len(pixel_map) == 36
    outside = pixel_map[pixel_map['CELL_ID'].isna()]
    assert len(outside) == 20
    assert set(outside['ROW']) | set(outside['COL']) >= {0, 5}
    counts = pixel_map['CELL_ID'].value_counts()
    assert all(counts[cell_id] == 4 for cell_id in [101, 102, 201, 202])

def test_build_pixel_map_boundary_pixels(backend):
    # pixel centres on the VIC cell edges at x = 200 and y = 200
    surface = make_raster(np.full((5, 5), 1000.0), xmin=-50, ymax=450)
    pixel_map = build_pixel_map(surface, backend, from_top=False)
    def cell_at(row, col):
        return pixel_map.loc[(pixel_map['ROW'] == row) &
            (pixel_map['COL'] == col), 'CELL_ID'].item()

    # every centre lies in or on a VIC cell
    assert pixel_map['CELL_ID'].notna().all()
    assert cell_at(2, 2) == 101
    assert cell_at(1, 2) == 101
    assert cell_at(3, 2) == 201
    assert cell_at(2, 1) == 101
    assert cell_at(2, 3) == 102
    assert cell_at(4, 4) == 202
