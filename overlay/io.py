"""io.py

  This module contains utility functions related to file input/output of the
  RGM input files: the RGM pixel to VIC grid cell mapping file and DEMs in
  ASCII Surfer grid (GSA) format.

"""

__all__ = ['write_gsa_grid', 'read_gsa_headers', 'read_gsa_grid',
  'write_pixel_map', 'get_rgm_pixel_mapping']

import csv

import numpy as np

from overlay.cells import normalize_cell_id
from overlay.errors import DataError
from overlay.raster import Raster

NA = 'NA'

def _format_value(value):
  return NA if np.isnan(value) else '{:.1f}'.format(value)

def write_gsa_grid(raster, outfilename):
  """ Writes a raster to ASCII file in the GSA format expected by the RGM
    for DEM and glacier mask grids. The header extents are measured between
    the outermost cell centres. Rows are written from ymin (first) to ymax
    (last), so the grid is flipped from its top-down storage.
  """
  zmin = np.nanmin(raster.values)
  zmax = np.nanmax(raster.values)
  half_x, half_y = raster.xres / 2, raster.yres / 2
  # header pairs are separated by two spaces
  header_lines = ['DSAA',
    '{:d}  {:d}'.format(raster.ncols, raster.nrows),
    '{:f}  {:f}'.format(raster.xmin + half_x, raster.xmax - half_x),
    '{:f}  {:f}'.format(raster.ymin + half_y, raster.ymax - half_y),
    '{:f}  {:f}'.format(zmin, zmax)]
  with open(outfilename, 'w', newline='') as csvfile:
    for header_line in header_lines:
      csvfile.write(header_line + '\n')
    writer = csv.writer(csvfile, delimiter=' ', lineterminator='\n')
    for row in raster.values[::-1]:
      writer.writerow([_format_value(v) for v in row])

def read_gsa_headers(dem_file):
  """ Opens and reads the header metadata from a GSA Digital Elevation Map
    file, and returns the cell centre extents and grid dimensions as
    [xmin, xmax, ymin, ymax, num_rows, num_cols]
  """
  with open(dem_file, 'r') as f:
    return _read_gsa_headers(f, dem_file)

def _read_gsa_headers(f, dem_file):
  first_line = f.readline()
  if not first_line.startswith('DSAA'):
    raise DataError('read_gsa_headers({}): DSAA header on first line of DEM \
file was not found or is malformed.  DEM file does not conform to ASCII grid \
format.'.format(dem_file))
  try:
    num_cols, num_rows = f.readline().split()
    xmin, xmax = f.readline().split()
    ymin, ymax = f.readline().split()
    out_1 = [float(n) for n in (xmin, xmax, ymin, ymax)]
    out_2 = [int(x) for x in (num_rows, num_cols)]
  except ValueError as e:
    raise DataError('read_gsa_headers({}): malformed header: {}'\
      .format(dem_file, e))
  return out_1 + out_2

def read_gsa_grid(dem_file, crs=None, res=None):
  """ Reads a GSA grid file written by write_gsa_grid() back into a Raster.
    The header extents run between cell centres, so half a cell is added on
    each side to recover the grid edges. res (x, y) is only needed for grids
    one cell wide or high, whose resolution the header cannot give.
  """
  with open(dem_file, 'r') as f:
    xmin, xmax, ymin, ymax, num_rows, num_cols = _read_gsa_headers(f, dem_file)
    f.readline() # value range
    tokens = f.read().split()
  if len(tokens) != num_rows * num_cols:
    raise DataError('read_gsa_grid({}): expected {} values, found {}'\
      .format(dem_file, num_rows * num_cols, len(tokens)))
  values = np.array([np.nan if t == NA else float(t) for t in tokens])
  values = values.reshape(num_rows, num_cols)[::-1]

  if res is None:
    if num_cols < 2 or num_rows < 2:
      raise DataError('read_gsa_grid({}): resolution of a {} x {} grid must \
be given'.format(dem_file, num_cols, num_rows))
    res = ((xmax - xmin) / (num_cols - 1), (ymax - ymin) / (num_rows - 1))
  resx, resy = res
  return Raster(values, xmin - resx / 2, xmax + resx / 2, ymin - resy / 2,
    ymax + resy / 2, crs)

def write_pixel_map(pixel_map, filename, ncols, nrows):
  """ Writes the RGM pixel to VIC grid cell mapping: NCOLS and NROWS header
    lines followed by the space delimited pixel table
  """
  with open(filename, 'w', newline='') as f:
    f.write('NCOLS  {:d}\n'.format(ncols))
    f.write('NROWS  {:d}\n'.format(nrows))
    pixel_map.to_csv(f, sep=' ', index=False, na_rep=NA,
      lineterminator='\n')

def get_rgm_pixel_mapping(pixel_map_file):
  """ Parses the RGM pixel to VIC grid cell mapping file and initialises a 2D
    grid of dimensions num_rows_dem x num_cols_dem (matching the RGM pixel
    grid), each element containing the VIC cell ID associated with that RGM
    pixel (masked where the pixel is outside every VIC cell). Also returns
    the pixel count of each VIC cell.
  """
  cell_areas = {}
  headers = {}
  with open(pixel_map_file, 'r') as f:
    # Read the number of columns and rows (order is unimportant)
    for _ in range(2):
      key, value = f.readline().split(None, 1)
      headers[key] = value
    nx = int(headers['NCOLS'])
    ny = int(headers['NROWS'])
    cell_id_map = np.ma.masked_all((ny, nx), dtype=np.int64)
    _ = f.readline() # Consume the column headers
    for line in f:
      # Note that we are ignoring the band and elevation columns
      _, i, j, _, _, cell_id = line.split()
      i, j = int(i), int(j)
      if cell_id == NA:
        continue
      # IDs may have been written as floats, e.g. 201.0
      cell_id = str(normalize_cell_id(float(cell_id)))
      cell_id_map[i, j] = int(cell_id)
      # Increment the pixel-granularity area within the grid cell
      cell_areas[cell_id] = cell_areas.get(cell_id, 0) + 1

  return cell_id_map, cell_areas, nx, ny
