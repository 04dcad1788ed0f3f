''' Tests for the polygons.py module: polygon subsetting, reprojection and
    location of points within the VIC cell polygons.
'''

import numpy as np
import geopandas as gpd
from shapely.geometry import Point, box

import pytest

from overlay.errors import DataError
from overlay.polygons import select_cell_polygons, polygon_extent,\
    GeoPandasBackend, GeometryBackend

def test_select_cell_polygons(cell_polygons):
    # requested order does not matter; polygon order is kept
    selected = select_cell_polygons(cell_polygons, [202, 101])
    assert list(selected['CELL_ID']) == [101, 202]
    assert list(selected.index) == [0, 1]

def test_select_cell_polygons_string_ids(cell_polygons):
    selected = select_cell_polygons(cell_polygons, ['102', '201'])
    assert list(selected['CELL_ID']) == [102, 201]

def test_select_cell_polygons_float_ids(cell_polygons):
    # decimal CELL_ID fields are read as float64
    polygons = cell_polygons.copy()
    polygons['CELL_ID'] = polygons['CELL_ID'].astype(float)
    selected = select_cell_polygons(polygons, [101, 202])
    assert list(selected['CELL_ID']) == [101.0, 202.0]
    backend = GeoPandasBackend()
    backend.reproject(selected, selected.crs)
    cell_id = backend.locate(Point(50, 350))
    assert cell_id == 101 and isinstance(cell_id, int)

def test_select_cell_polygons_missing(cell_polygons):
    with pytest.raises(DataError) as excinfo:
        select_cell_polygons(cell_polygons, [101, 301, 302])
    assert '301, 302' in str(excinfo.value)

def test_select_cell_polygons_no_id_field(cell_polygons):
    with pytest.raises(DataError):
        select_cell_polygons(cell_polygons.rename(columns={'CELL_ID': 'ID'}),
            [101])

def test_polygon_extent(cell_polygons):
    assert polygon_extent(cell_polygons) == (0, 400, 0, 400)
    assert polygon_extent(select_cell_polygons(cell_polygons, [202]))\
        == (200, 400, 0, 200)

def test_reproject(cell_polygons):
    backend = GeoPandasBackend()
    geographic = cell_polygons.to_crs('EPSG:4326')
    projected = backend.reproject(geographic, 'EPSG:3005')
    assert projected.crs == cell_polygons.crs
    np.testing.assert_allclose(projected.total_bounds, [0, 0, 400, 400],
        atol=1e-3)
    assert backend.locate(Point(50, 350)) == 101

def test_reproject_no_crs():
    polygons = gpd.GeoDataFrame({'CELL_ID': [101],
        'geometry': [box(0, 200, 200, 400)]})
    with pytest.raises(DataError):
        GeoPandasBackend().reproject(polygons, 'EPSG:3005')

def test_reproject_no_target_crs(cell_polygons):
    with pytest.raises(DataError):
        GeoPandasBackend().reproject(cell_polygons, None)

def test_locate_before_reproject():
    with pytest.raises(DataError):
        GeoPandasBackend().locate(Point(0, 0))

@pytest.mark.parametrize(('point', 'expected'), [
    ((50, 350), 101),
    ((350, 350), 102),
    ((50, 50), 201),
    ((399, 1), 202),
    # shared edges and corners go to the first polygon in the set
    ((200, 300), 101),
    ((200, 100), 201),
    ((100, 200), 101),
    ((200, 200), 101),
    # outer boundary
    ((400, 0), 202),
    ((500, 500), None),
    ((-0.1, 100), None),
])
def test_locate(cell_polygons, point, expected):
    backend = GeoPandasBackend()
    backend.reproject(cell_polygons, cell_polygons.crs)
    assert backend.locate(Point(*point)) == expected
    assert backend.locate(point) == expected

def test_locate_points_matches_locate(cell_polygons):
    backend = GeoPandasBackend()
    backend.reproject(cell_polygons, cell_polygons.crs)
    xs, ys = np.meshgrid(np.arange(-50, 451, 50), np.arange(-50, 451, 50))
    expected = [backend.locate(Point(x, y)) for x, y in zip(xs.ravel(),
        ys.ravel())]
    assert backend.locate_points(xs.ravel(), ys.ravel()) == expected

def test_locate_overlapping_polygons():
    polygons = gpd.GeoDataFrame({'CELL_ID': ['b', 'a'],
        'geometry': [box(0, 0, 10, 10), box(5, 5, 15, 15)]}, crs='EPSG:3005')
    backend = GeoPandasBackend()
    backend.reproject(polygons, 'EPSG:3005')
    assert backend.locate_points([7, 12, 2], [7, 12, 2]) == ['b', 'a', 'b']

def test_default_locate_points(cell_polygons):
    class SimpleBackend(GeometryBackend):
        def reproject(self, polygons, target_crs):
            self.polygons = polygons.to_crs(target_crs)
            return self.polygons
        def locate(self, point):
            for cell_id, geom in zip(self.polygons['CELL_ID'],
                self.polygons.geometry):
                if geom.covers(point):
                    return cell_id
            return None

    backend = SimpleBackend()
    backend.reproject(cell_polygons, cell_polygons.crs)
    assert backend.locate_points([50, 250, 900], [50, 50, 900])\
        == [201, 202, None]
