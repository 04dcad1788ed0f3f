"""glacier.py

  Quality control of the surface/bed DEM pair and derivation of the
  glacier mask.
"""

__all__ = ['check_elevation_rasters', 'make_glacier_mask']

import numpy as np

from overlay.errors import DataError
from overlay.params import GLACIER_THICKNESS_THRESHOLD, MIN_ELEVATION

def _check_pair(surface, bed):
  if not surface.same_geometry(bed):
    raise DataError('Surface and bed DEMs do not share the same grid geometry')

def check_elevation_rasters(surface, bed,
  threshold=GLACIER_THICKNESS_THRESHOLD):
  """ Performs basic quality control on the surface and bed DEMs, which may
    derive from different data sources and methodology. Zero or negative
    elevations (which the RGM cannot handle) are set to MIN_ELEVATION. Then,
    where the bed is above the surface or the difference between them is no
    more than threshold (i.e. noise), both are set to their average. Returns
    the corrected (surface, bed) pair; the inputs are left untouched.
  """
  _check_pair(surface, bed)
  sfc = surface.values.copy()
  bdem = bed.values.copy()

  sfc[sfc <= 0] = MIN_ELEVATION
  bdem[bdem <= 0] = MIN_ELEVATION

  index = (sfc - bdem) <= threshold
  average = (sfc[index] + bdem[index]) / 2
  sfc[index] = average
  bdem[index] = average

  return surface.copy(sfc), bed.copy(bdem)

def make_glacier_mask(surface, bed, threshold=GLACIER_THICKNESS_THRESHOLD):
  """ Returns a raster of 1 where the ice thickness (surface - bed) exceeds
    threshold, 0 elsewhere
  """
  _check_pair(surface, bed)
  with np.errstate(invalid='ignore'):
    mask = np.where((surface.values - bed.values) > threshold, 1.0, 0.0)
  return surface.copy(mask)
