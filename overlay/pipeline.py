"""pipeline.py

  Runs the RGM-VIC overlay for one sub-basin: selects the basin's VIC cells,
  subsets and reprojects their polygons, crops the surface and bed DEMs to
  them, corrects the DEMs, builds the glacier mask and the pixel map, and
  writes the four RGM input files:

  1) pixel_map_<basin>.txt, the mapping of RGM pixels to VIC grid cells
  2) srf_dem_[<refyear>_]<basin>.gsa, the surface topography DEM
  3) bed_dem_<basin>.gsa, the bed topography DEM
  4) glac_mask_[<refyear>_]<basin>.gsa, the glacier mask
"""

__all__ = ['OverlayProduct', 'OverlayResult', 'OutputFiles', 'rgm_vic_overlay',
  'output_filenames', 'run_basin']

from collections import namedtuple
import logging
import os

from overlay.cells import select_basin_cells
from overlay.errors import ConfigurationError
from overlay.glacier import check_elevation_rasters, make_glacier_mask
from overlay.io import write_gsa_grid, write_pixel_map
from overlay.params import OverlayParams
from overlay.pixelmap import build_pixel_map
from overlay.polygons import GeoPandasBackend, select_cell_polygons,\
  polygon_extent
from overlay.progress import log_progress
from overlay.raster import crop_and_aggregate

OverlayProduct = namedtuple('OverlayProduct',
  ['sub_polygons', 'surface', 'bed', 'glacier_mask', 'pixel_map'])

OutputFiles = namedtuple('OutputFiles',
  ['pixel_map', 'surface', 'bed', 'glacier_mask'])

class OverlayResult(object):
  """Outcome of a basin run. str() gives 'TRUE' on success, or the message
    prefixed with rgm_vic_overlay_WARNING/rgm_vic_overlay_ERROR.
  """
  def __init__(self, success=True, severity=None, message=None, files=None,
    product=None):
    self.success = success
    self.severity = severity
    self.message = message
    self.files = files or []
    self.product = product

  @classmethod
  def from_exception(cls, exc):
    severity = getattr(exc, 'severity', 'ERROR')
    return cls(False, severity, '{}: {}'.format(exc.__class__.__name__, exc))

  def __bool__(self):
    return self.success

  def __str__(self):
    if self.success:
      return 'TRUE'
    return 'rgm_vic_overlay_{}: {}'.format(self.severity, self.message)

  def __repr__(self):
    return '{}({!r}, {!r}, {!r})'.format(self.__class__.__name__,
      self.success, self.severity, self.message)

def rgm_vic_overlay(surface, bed, polygons, basin, cell_file, params=None,
  backend=None, progress=None):
  """ Constructs the union of the RGM pixel raster and the VIC cells of
    basin. surface and bed are Raster DEMs sharing one grid; polygons is a
    GeoDataFrame of VIC cells carrying CELL_ID; cell_file is the cell map
    (file name or DataFrame) assigning VIC cells to basins.
    Returns an OverlayProduct.
  """
  for name, value in (('surface', surface), ('bed', bed),
    ('polygons', polygons), ('basin', basin), ('cell_file', cell_file)):
    if value is None:
      raise ConfigurationError("Missing argument for '{}'".format(name))
  if params is None:
    params = OverlayParams()
  if backend is None:
    backend = GeoPandasBackend()
  if progress is None:
    progress = log_progress

  progress('read', 'Reading input data: surface DEM {}, bed DEM {}, {} VIC \
cell polygons'.format(surface, bed, len(polygons)))

  progress('subset', 'Sub-setting VIC soil polygons for basin {}'\
    .format(basin))
  cells = select_basin_cells(cell_file, basin)
  sub_polygons = select_cell_polygons(polygons, cells)

  progress('reproject', 'Projecting {} sub-setted soil polygons'\
    .format(len(sub_polygons)))
  sub_polygons = backend.reproject(sub_polygons, surface.crs)

  progress('crop', 'Cropping RGM rasters with {}-m buffer and aggregation \
factor of {}'.format(params.buffer, params.aggregation_factor))
  surface, bed = crop_and_aggregate(surface, bed,
    polygon_extent(sub_polygons), params.buffer, params.aggregation_factor)

  progress('qaqc', 'Checking surface and bed elevations')
  surface, bed = check_elevation_rasters(surface, bed, params.mindep)

  progress('mask', 'Generating glacier mask')
  glacier_mask = make_glacier_mask(surface, bed, params.mindep)

  progress('overlay', 'Taking overlay of {} RGM pixels and VIC soil polygons'\
    .format(surface.values.size))
  pixel_map = build_pixel_map(surface, backend, params.zref, params.deltaz,
    params.fromtop)

  return OverlayProduct(sub_polygons, surface, bed, glacier_mask, pixel_map)

def output_filenames(basin, outdir='.', refyear=None):
  """ Returns the paths of the pixel map, surface DEM, bed DEM and glacier
    mask files of basin. refyear, when given, prefixes the basin name of the
    surface DEM and glacier mask files only.
  """
  refyr = '' if refyear is None else '{}_'.format(refyear)
  return OutputFiles(
    os.path.join(outdir, 'pixel_map_{}.txt'.format(basin)),
    os.path.join(outdir, 'srf_dem_{}{}.gsa'.format(refyr, basin)),
    os.path.join(outdir, 'bed_dem_{}.gsa'.format(basin)),
    os.path.join(outdir, 'glac_mask_{}{}.gsa'.format(refyr, basin)))

def _write_outputs(product, params, basin, progress):
  files = output_filenames(basin, params.outdir, params.refyear)
  writes = []
  if not params.nomap:
    writes.append(('pixel map', files.pixel_map, lambda f: write_pixel_map(
      product.pixel_map, f, product.surface.ncols, product.surface.nrows)))
  if not params.nosurf:
    writes.append(('surface DEM', files.surface,
      lambda f: write_gsa_grid(product.surface, f)))
  if not params.nobed:
    writes.append(('bed DEM', files.bed,
      lambda f: write_gsa_grid(product.bed, f)))
  if not params.nomask:
    writes.append(('glacier mask', files.glacier_mask,
      lambda f: write_gsa_grid(product.glacier_mask, f)))

  written = []
  try:
    for what, filename, write in writes:
      progress('write', 'Writing {} to file {}'.format(what, filename))
      written.append(filename)
      write(filename)
  except Exception:
    for filename in written:
      if os.path.exists(filename):
        os.remove(filename)
    raise
  return written

def run_basin(surface, bed, polygons, basin, cell_file, params=None,
  backend=None, progress=None):
  """ Builds and writes the RGM input files of basin. Never raises: any
    failure is logged and returned as an unsuccessful OverlayResult, and
    nothing is left written for a failed basin.
  """
  if params is None:
    params = OverlayParams()
  if progress is None:
    progress = log_progress
  try:
    product = rgm_vic_overlay(surface, bed, polygons, basin, cell_file,
      params, backend, progress)
    files = _write_outputs(product, params, basin, progress)
  except Exception as e:
    result = OverlayResult.from_exception(e)
    if result.severity == 'WARNING':
      logging.warning('Basin %s: %s', basin, result.message)
    else:
      logging.error('Basin %s: %s', basin, result.message)
    return result
  return OverlayResult(files=files, product=product)
