"""raster.py

  This module contains the Raster grid used for the RGM surface and bed DEMs
  and the functions that crop and coarsen them to the extent of a basin.

  Values are stored top-down: storage row 0 is the northern edge of the grid
  (ymax), as numpy and rasterio store them.
"""

__all__ = ['Raster', 'buffered_extent', 'crop_raster', 'aggregate_raster',
  'crop_and_aggregate']

from math import ceil, floor
import logging
import warnings

import numpy as np
import rasterio
from pyproj import CRS

from overlay.errors import ConfigurationError, DataError

# Cell index arithmetic is rounded to this many decimals before snapping,
# so that extents lying on cell edges do not pick up an extra cell
SNAP_DECIMALS = 6

class Raster(object):
  """A 2D grid of float values with its extent and coordinate reference
    system
  """
  def __init__(self, values, xmin, xmax, ymin, ymax, crs=None):
    self.values = np.asarray(values, dtype=float)
    if self.values.ndim != 2:
      raise DataError('Raster values must be a 2D array (got {} dimensions)'\
        .format(self.values.ndim))
    self.xmin, self.xmax = float(xmin), float(xmax)
    self.ymin, self.ymax = float(ymin), float(ymax)
    self.crs = CRS.from_user_input(crs) if crs is not None else None

  @classmethod
  def from_file(cls, path, band=1):
    """ Reads one band of a raster file (GeoTIFF or any format GDAL can
      read). Nodata cells become NaN.
    """
    with rasterio.open(path) as src:
      transform = src.transform
      if transform.b != 0 or transform.d != 0:
        raise DataError('Raster {} is rotated; only north-up rasters are \
supported'.format(path))
      values = src.read(band, masked=True).astype(float).filled(np.nan)
      if transform.e > 0:
        values = values[::-1]
      left, bottom, right, top = src.bounds
      crs = src.crs.to_wkt() if src.crs else None
    logging.debug('Read %s x %s raster from %s', values.shape[1],
      values.shape[0], path)
    return cls(values, left, right, min(bottom, top), max(bottom, top), crs)

  def __repr__(self):
    return '{}(ncols={}, nrows={}, extent=({}, {}, {}, {}), crs={})'.format(
      self.__class__.__name__, self.ncols, self.nrows, self.xmin, self.xmax,
      self.ymin, self.ymax, self.crs.to_string() if self.crs else None)

  @property
  def nrows(self):
    return self.values.shape[0]

  @property
  def ncols(self):
    return self.values.shape[1]

  @property
  def xres(self):
    return (self.xmax - self.xmin) / self.ncols

  @property
  def yres(self):
    return (self.ymax - self.ymin) / self.nrows

  @property
  def extent(self):
    return self.xmin, self.xmax, self.ymin, self.ymax

  def cell_centres(self):
    """ Returns 2D arrays of the x and y coordinates of each cell centre,
      in storage order
    """
    xs = self.xmin + (np.arange(self.ncols) + 0.5) * self.xres
    ys = self.ymax - (np.arange(self.nrows) + 0.5) * self.yres
    return np.meshgrid(xs, ys)

  def same_geometry(self, other):
    return (self.values.shape == other.values.shape
      and np.allclose(self.extent, other.extent)
      and self.crs == other.crs)

  def copy(self, values=None):
    """ Returns a raster with this geometry and a copy of values (or of this
      raster's own values)
    """
    if values is None:
      values = self.values
    return Raster(np.array(values, dtype=float), self.xmin, self.xmax,
      self.ymin, self.ymax, self.crs)

def buffered_extent(extent, buffer):
  """ Grows an (xmin, xmax, ymin, ymax) extent by buffer map units (metres)
    on every side
  """
  xmin, xmax, ymin, ymax = extent
  return xmin - buffer, xmax + buffer, ymin - buffer, ymax + buffer

def crop_raster(raster, extent):
  """ Crops raster to extent, snapping the crop window outward to whole
    cells so that cells partly inside the extent are kept. The window is
    limited to the raster's own bounds.
  """
  xmin, xmax, ymin, ymax = extent
  xmin, xmax = max(xmin, raster.xmin), min(xmax, raster.xmax)
  ymin, ymax = max(ymin, raster.ymin), min(ymax, raster.ymax)
  if xmin > xmax or ymin > ymax:
    raise DataError('Extent {} does not overlap the raster extent {}'\
      .format(extent, raster.extent))

  def snap(offset, res, round_):
    return int(round_(round(offset / res, SNAP_DECIMALS)))

  col0 = snap(xmin - raster.xmin, raster.xres, floor)
  col1 = snap(xmax - raster.xmin, raster.xres, ceil)
  row0 = snap(raster.ymax - ymax, raster.yres, floor)
  row1 = snap(raster.ymax - ymin, raster.yres, ceil)
  # an extent on the east or south edge falls in the last column or row
  col0 = min(col0, raster.ncols - 1)
  row0 = min(row0, raster.nrows - 1)
  # a zero-width extent still covers the cell it falls in
  col1 = min(max(col1, col0 + 1), raster.ncols)
  row1 = min(max(row1, row0 + 1), raster.nrows)

  values = raster.values[row0:row1, col0:col1].copy()
  return Raster(values,
    raster.xmin + col0 * raster.xres, raster.xmin + col1 * raster.xres,
    raster.ymax - row1 * raster.yres, raster.ymax - row0 * raster.yres,
    raster.crs)

def aggregate_raster(raster, factor):
  """ Coarsens raster by averaging blocks of factor x factor cells. Where
    the grid dimensions are not multiples of factor it is expanded to the
    east and south; the padding (and any NaN) is left out of the means.
  """
  if factor < 1 or factor != int(factor):
    raise ConfigurationError('Aggregation factor must be an integer >= 1 \
(got {})'.format(factor))
  factor = int(factor)
  if factor == 1:
    return raster.copy()

  nrows = int(ceil(raster.nrows / factor))
  ncols = int(ceil(raster.ncols / factor))
  padded = np.full((nrows * factor, ncols * factor), np.nan)
  padded[:raster.nrows, :raster.ncols] = raster.values
  blocks = padded.reshape(nrows, factor, ncols, factor)
  with warnings.catch_warnings():
    # blocks made up entirely of nodata average to NaN
    warnings.simplefilter('ignore', RuntimeWarning)
    values = np.nanmean(blocks, axis=(1, 3))

  return Raster(values,
    raster.xmin, raster.xmin + ncols * factor * raster.xres,
    raster.ymax - nrows * factor * raster.yres, raster.ymax,
    raster.crs)

def crop_and_aggregate(surface, bed, extent, buffer=0.0, factor=1):
  """ Crops the surface and bed DEMs to extent plus buffer and aggregates
    them by factor. Both DEMs must share the same grid and projection.
  """
  if not surface.same_geometry(bed):
    raise DataError('Surface DEM {} and bed DEM {} do not share the same \
grid geometry and projection'.format(surface, bed))
  window = buffered_extent(extent, buffer)
  surface = aggregate_raster(crop_raster(surface, window), factor)
  bed = aggregate_raster(crop_raster(bed, window), factor)
  return surface, bed
