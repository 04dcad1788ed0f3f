"""
    This is a set of test fixtures for the RGM-VIC overlay.
    They are mostly based upon a simple domain of four square VIC cells,
    each 200m x 200m, covering x = 0..400 and y = 0..400 in BC Albers
    (EPSG:3005), overlain by RGM DEMs of 100m pixels:

    y = 400 +-------+-------+
            |  101  |  102  |
    y = 200 +-------+-------+
            |  201  |  202  |
    y = 0   +-------+-------+
            x = 0   200     400

    The cell map assigns all four cells to basin 'PEYTO'. Basin 'OTHER' holds
    cell 301, which has no polygon.
"""

import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import box

import pytest

from overlay.raster import Raster

CRS = 'EPSG:3005'

def pytest_report_header(config):
    return "RGM-VIC Overlay - Automated Test Suite"

def make_raster(values, xmin=0.0, ymax=400.0, res=100.0, crs=CRS):
    values = np.asarray(values, dtype=float)
    nrows, ncols = values.shape
    return Raster(values, xmin, xmin + ncols * res, ymax - nrows * res, ymax,
                  crs)

@pytest.fixture
def cell_polygons():
    return gpd.GeoDataFrame({
        'CELL_ID': [101, 102, 201, 202],
        'geometry': [box(0, 200, 200, 400), box(200, 200, 400, 400),
                     box(0, 0, 200, 200), box(200, 0, 400, 200)]},
        crs=CRS)

@pytest.fixture
def cell_map():
    return pd.DataFrame({'CELL_ID': [101, 102, 201, 202, 301],
                         'NAME': ['PEYTO'] * 4 + ['OTHER']})

@pytest.fixture
def cell_file(tmp_path, cell_map):
    fname = tmp_path / 'cell_map.csv'
    cell_map.to_csv(fname, index=False)
    return str(fname)

@pytest.fixture
def wide_dems():
    """ 8x8 surface and bed DEMs reaching 200m beyond the VIC cells on every
        side. Surface elevations rise by 10m per pixel from the north-west
        corner; the bed sits 50m below the surface.
    """
    surface = make_raster(2000 + 10 * np.arange(64).reshape(8, 8),
                          xmin=-200.0, ymax=600.0)
    bed = surface.copy(surface.values - 50)
    return surface, bed

@pytest.fixture
def uniform_dems():
    def _uniform_dems(surface_elev, bed_elev, shape=(4, 4)):
        return make_raster(np.full(shape, surface_elev)),\
            make_raster(np.full(shape, bed_elev))
    return _uniform_dems
