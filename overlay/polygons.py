"""polygons.py

  This module handles the VIC computational grid polygons: loading them,
  selecting the polygons of a basin, and the geometry backend used to
  reproject them and locate RGM pixel centres within them.
"""

__all__ = ['load_polygons', 'select_cell_polygons', 'polygon_extent',
  'GeometryBackend', 'GeoPandasBackend']

import logging

import numpy as np
import geopandas as gpd
from shapely.geometry import Point

from overlay.cells import normalize_cell_id
from overlay.errors import DataError
from overlay.params import CELL_ID_FIELD

def load_polygons(path, layer=None):
  """ Reads the VIC cell polygons (shapefile, GeoPackage, GeoJSON...) """
  if layer is None:
    return gpd.read_file(path)
  return gpd.read_file(path, layer=layer)

def select_cell_polygons(polygons, cell_ids, id_field=CELL_ID_FIELD):
  """ Returns the polygons whose id_field value is in cell_ids, in the order
    of the polygon set, with a fresh positional index. IDs are normalised
    and then compared as strings so integer IDs from a CSV match float or
    string IDs from a vector file.
  """
  if id_field not in polygons:
    raise DataError('Polygon set has no {} attribute'.format(id_field))
  poly_ids = polygons[id_field].map(lambda c: str(normalize_cell_id(c)))
  wanted = [str(normalize_cell_id(c)) for c in cell_ids]
  missing = sorted(set(wanted) - set(poly_ids))
  if missing:
    raise DataError('Some (or all) cells in cell_list not contained in \
soil_poly. Check the cell IDs. Missing: {}'.format(', '.join(missing)))
  selected = polygons[poly_ids.isin(wanted).values]
  logging.debug('Selected %s of %s VIC cell polygons', len(selected),
    len(polygons))
  return selected.reset_index(drop=True)

def polygon_extent(polygons):
  """ Returns the (xmin, xmax, ymin, ymax) bounding extent of the polygons """
  xmin, ymin, xmax, ymax = polygons.total_bounds
  return xmin, xmax, ymin, ymax

class GeometryBackend(object):
  """Interface to the geometry operations needed by the overlay.
    reproject() returns the polygons in target_crs and makes them the set
    that locate() searches.
  """
  def reproject(self, polygons, target_crs):
    raise NotImplementedError

  def locate(self, point):
    """ Returns the cell ID of the polygon containing point, or None """
    raise NotImplementedError

  def locate_points(self, xs, ys):
    return [self.locate(Point(x, y)) for x, y in zip(xs, ys)]

class GeoPandasBackend(GeometryBackend):
  """Geometry backend built on geopandas and the shapely STRtree spatial
    index. A point lying on a boundary shared by several polygons (or inside
    overlapping polygons) is assigned to the polygon that comes first in the
    polygon set.
  """
  def __init__(self, id_field=CELL_ID_FIELD):
    self.id_field = id_field
    self.polygons = None
    self._cell_ids = []

  def reproject(self, polygons, target_crs):
    if polygons.crs is None:
      raise DataError('VIC cell polygons have no coordinate reference system')
    if target_crs is None:
      raise DataError('Raster has no coordinate reference system to project \
the VIC cell polygons to')
    projected = polygons.to_crs(target_crs).reset_index(drop=True)
    self.use(projected)
    return projected

  def use(self, polygons):
    """ Sets the polygons searched by locate() without reprojecting them """
    self.polygons = polygons
    self._cell_ids = [normalize_cell_id(c) for c in polygons[self.id_field]]

  def _check_polygons(self):
    if self.polygons is None:
      raise DataError('No polygons to locate points in; call reproject() \
first')

  def locate(self, point):
    self._check_polygons()
    if not isinstance(point, Point):
      point = Point(*point)
    hits = self.polygons.sindex.query(point, predicate='intersects')
    if len(hits) == 0:
      return None
    return self._cell_ids[int(np.min(hits))]

  def locate_points(self, xs, ys):
    self._check_polygons()
    points = gpd.points_from_xy(np.ravel(xs), np.ravel(ys))
    point_idx, poly_idx = self.polygons.sindex.query(points,
      predicate='intersects')
    # keep the first polygon (in polygon order) hit by each point
    order = np.lexsort((poly_idx, point_idx))
    point_idx, poly_idx = point_idx[order], poly_idx[order]
    located, first = np.unique(point_idx, return_index=True)
    owner = np.full(len(points), -1)
    owner[located] = poly_idx[first]
    return [self._cell_ids[i] if i >= 0 else None for i in owner]
