#!/usr/bin/env python

""" This script builds the static input files of the Regional Glacier Model
  (RGM) for one or more VIC sub-basins: a mapping of RGM pixels to VIC grid
  cells, the surface and bed topography DEMs and the glacier mask (GSA
  format). Basins are processed independently; the result of each ('TRUE',
  or a warning/error message) is printed on its own line.
"""

import argparse
import logging
import os
import sys

from overlay.glacier_plotter import plot_overlay
from overlay.params import OverlayParams
from overlay.pipeline import run_basin
from overlay.polygons import load_polygons
from overlay.progress import log_progress, print_progress
from overlay.raster import Raster

class MyParser(argparse.ArgumentParser):
  def error(self, message):
    sys.stderr.write('error: %s\n' % message)
    self.print_help()
    sys.exit(2)

def parse_input_parms(argv=None):
  parser = MyParser(description=__doc__)
  parser.add_argument('-s', '--sdem', action='store', dest='sdem', type=str,\
    required=True, help='file name and path of the surface DEM raster')
  parser.add_argument('-b', '--bdem', action='store', dest='bdem', type=str,\
    required=True, help='file name and path of the bed DEM raster (same grid \
    and projection as the surface DEM)')
  parser.add_argument('-p', '--plygn', action='store', dest='plygn', type=str,\
    required=True, help='file name and path of the VIC cell polygons (any \
    vector format readable by geopandas, with a CELL_ID attribute)')
  parser.add_argument('--layer', action='store', dest='layer', type=str,\
    default=None, help='layer of the VIC cell polygon file to read')
  parser.add_argument('-w', '--basin', action='store', dest='basins',\
    nargs='+', required=True, help='sub-basin short name(s)')
  parser.add_argument('-c', '--cellf', action='store', dest='cellf', type=str,\
    required=True, help='file name of the CSV mapping VIC cell IDs to basin \
    names; must contain CELL_ID and NAME fields')
  parser.add_argument('--params', action='store', dest='params_file',\
    type=str, default=None, help='file of KEY value overlay parameters; \
    command line options override it')
  parser.add_argument('-z', '--zref', action='store', dest='zref', type=float,\
    help='reference elevation, i.e. bottom elevation of lowest band \
    (default = 0)')
  parser.add_argument('-d', '--deltaz', action='store', dest='deltaz',\
    type=float, help='band relief, i.e. zband2-zband1 (default = 200)')
  parser.add_argument('-m', '--mindep', action='store', dest='mindep',\
    type=float, help='threshold depth (m) for glacier presence \
    (default = 2.0)')
  parser.add_argument('-y', '--refyear', action='store', dest='refyear',\
    type=int, help='reference year of the surface DEM and glacier mask, \
    added to their file names')
  parser.add_argument('-x', '--buffer', action='store', dest='buffer',\
    type=float, help='buffer (in metres) to increase extent of rasters \
    beyond soil polygon extent (default = 0)')
  parser.add_argument('-a', '--aggreg', action='store', dest='aggreg',\
    type=float, help='DEM aggregation factor (default = 1)')
  parser.add_argument('-t', '--fromtop', action='store_true', dest='fromtop',\
    default=None, help='count rows from top of map to bottom, i.e. ymax to \
    ymin (default)')
  parser.add_argument('--frombottom', action='store_false', dest='fromtop',\
    help='number rows in raster storage order')
  parser.add_argument('-o', '--outdir', action='store', dest='outdir',\
    type=str, help='output directory (default = ./)')
  parser.add_argument('-M', '--nomap', action='store_true', dest='nomap',\
    default=None, help='do not write pixel map to file')
  parser.add_argument('-S', '--nosurf', action='store_true', dest='nosurf',\
    default=None, help='do not write surface DEM to file')
  parser.add_argument('-B', '--nobed', action='store_true', dest='nobed',\
    default=None, help='do not write bed DEM to file')
  parser.add_argument('-G', '--nomask', action='store_true', dest='nomask',\
    default=None, help='do not write glacier mask to file')
  parser.add_argument('--plot', action='store_true', default=False,\
    dest='plot', help='save a figure of the surface DEM, glacier mask and \
    glacier thickness of each basin to the output directory')
  parser.add_argument('-v', '--verbose', action='store_true', default=False,\
    dest='verbose', help='print progress messages')
  parser.add_argument('--loglevel', action='store', dest='loglevel', type=str,\
    default='INFO', help='the logging verbosity level. Options are: DEBUG, \
    INFO, WARNING, ERROR.')
  parser.add_argument('--logfile', action='store', dest='logfile', type=str,\
    default=None, help='file to write the log to (default: standard error)')

  return parser.parse_args(argv)

def overlay_params(options):
  """ Builds the OverlayParams from the parameter file, if any, and the
    command line options that were given
  """
  overrides = {name: getattr(options, name) for name in\
    OverlayParams.members() if getattr(options, name, None) is not None}
  if options.params_file:
    with open(options.params_file, 'r') as f:
      return OverlayParams.from_file(f, **overrides)
  return OverlayParams(**overrides)

def main(argv=None):
  options = parse_input_parms(argv)

  # Set up logging
  numeric_loglevel = getattr(logging, options.loglevel.upper())
  logging.basicConfig(filename=options.logfile, level=numeric_loglevel,\
    format='%(levelname)s %(asctime)s %(message)s')
  logging.info('------- RGM-VIC Overlay Startup -------')

  params = overlay_params(options)
  progress = print_progress if options.verbose else log_progress

  logging.info('Loading surface DEM from %s', options.sdem)
  surface = Raster.from_file(options.sdem)
  logging.info('Loading bed DEM from %s', options.bdem)
  bed = Raster.from_file(options.bdem)
  logging.info('Loading VIC cell polygons from %s', options.plygn)
  polygons = load_polygons(options.plygn, options.layer)

  failures = 0
  for basin in options.basins:
    logging.info('Processing basin %s', basin)
    result = run_basin(surface, bed, polygons, basin, options.cellf, params,\
      progress=progress)
    print(result)
    if result:
      logging.info('%s completed', basin)
      if options.plot:
        product = result.product
        plot_overlay(product.surface, product.bed, product.glacier_mask,\
          basin, os.path.join(params.outdir, 'overlay_{}.png'.format(basin)),\
          params.mindep)
    else:
      logging.error('Error in %s', basin)
      failures += 1

  logging.info('Processing of %s basin(s) complete, %s failed',\
    len(options.basins), failures)
  return 1 if failures else 0

if __name__ == '__main__':
  sys.exit(main())
