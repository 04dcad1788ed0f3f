"""pixelmap.py

  Builds the mapping of RGM pixels to VIC grid cells: one record per pixel
  of the cropped surface DEM giving its row, column, elevation band,
  elevation and the ID of the VIC cell whose polygon contains its centre.
"""

__all__ = ['PIXEL_MAP_COLUMNS', 'pixel_rows_cols', 'build_pixel_map']

import numpy as np
import pandas as pd

from overlay.params import ZREF, BAND_SIZE, CELL_ID_FIELD

PIXEL_MAP_COLUMNS = ['PIXEL_ID', 'ROW', 'COL', 'BAND', 'ELEV', CELL_ID_FIELD]

def pixel_rows_cols(pixels, ncols, nrows, from_top=True):
  """ Returns the 0-based (rows, cols) of 1-based row-major pixel ids.
    With from_top, rows are counted from the last storage row, so that the
    northern edge of the grid is row nrows-1 and row 0 is the first row of
    the GSA grid files.
  """
  pixels = np.asarray(pixels)
  rows = np.ceil(pixels / ncols).astype(int) - 1
  cols = pixels - rows * ncols - 1
  if from_top:
    rows = (nrows - rows) - 1
  return rows, cols

def build_pixel_map(surface, backend, zref=ZREF, deltaz=BAND_SIZE,
  from_top=True):
  """ Overlays the pixels of the surface DEM on the VIC cell polygons held by
    backend (see polygons.GeometryBackend). Pixels falling outside every
    polygon are kept with a null cell ID. Returns a DataFrame sorted by ROW
    then COL.
  """
  elevs = surface.values.ravel()
  pixels = np.arange(1, elevs.size + 1)
  rows, cols = pixel_rows_cols(pixels, surface.ncols, surface.nrows, from_top)
  with np.errstate(invalid='ignore'):
    bands = np.floor((elevs - zref) / deltaz)

  xs, ys = surface.cell_centres()
  cell_ids = backend.locate_points(xs.ravel(), ys.ravel())

  pixel_map = pd.DataFrame({
    'PIXEL_ID': pixels,
    'ROW': rows,
    'COL': cols,
    'BAND': pd.array(bands, dtype='Int64'),
    'ELEV': pd.array(np.round(elevs), dtype='Int64'),
    CELL_ID_FIELD: pd.Series(cell_ids, dtype=object),
  }, columns=PIXEL_MAP_COLUMNS)
  pixel_map = pixel_map.sort_values(['ROW', 'COL'], kind='mergesort')
  return pixel_map.reset_index(drop=True)
