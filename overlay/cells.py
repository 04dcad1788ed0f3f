"""cells.py

  This module reads the table mapping VIC grid cell IDs to sub-basin names
  and selects the cells that make up the basin being processed.
"""

__all__ = ['load_cell_map', 'select_basin_cells', 'normalize_cell_id']

import os
import logging

import numpy as np
import pandas as pd

from overlay.errors import ConfigurationError
from overlay.params import CELL_ID_FIELD, BASIN_FIELD

def load_cell_map(cell_file):
  """ Reads the cell lookup table (CSV) which must contain CELL_ID and NAME
    columns, one row per VIC cell.
  """
  if not os.path.isfile(cell_file):
    raise ConfigurationError('File {} does not exist.'.format(cell_file))
  cell_map = pd.read_csv(cell_file)
  missing = [c for c in (CELL_ID_FIELD, BASIN_FIELD) if c not in cell_map]
  if missing:
    raise ConfigurationError('Cell map file {} is missing column(s) {}'\
      .format(cell_file, ', '.join(missing)))
  logging.debug('Read %s cells from cell map %s', len(cell_map), cell_file)
  return cell_map

def select_basin_cells(cell_map, basin):
  """ Returns the list of cell IDs assigned to basin (exact, case-sensitive
    match on NAME), in the order they appear in the cell map. cell_map can be
    a DataFrame or the name of the cell map file.
  """
  if not isinstance(cell_map, pd.DataFrame):
    cell_map = load_cell_map(cell_map)
  cells = [normalize_cell_id(c) for c in
    cell_map.loc[cell_map[BASIN_FIELD] == basin, CELL_ID_FIELD]]
  if not cells:
    raise ConfigurationError('No cells in cell map match name {}'\
      .format(basin))
  return cells

def normalize_cell_id(cell_id):
  """ Returns cell_id with integral floats (e.g. 101.0 from a shapefile
    decimal field or a CSV column with gaps) and numpy integers turned into
    ints, so that an ID matches and is written the same way whatever the
    type of the column it came from.
  """
  if isinstance(cell_id, (float, np.floating)) and np.isfinite(cell_id)\
    and float(cell_id).is_integer():
    return int(cell_id)
  if isinstance(cell_id, np.integer):
    return int(cell_id)
  return cell_id
