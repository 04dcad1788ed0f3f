"""progress.py

  Progress reporting for the overlay pipeline. The pipeline calls a
  progress(stage, message) callable at each named stage and never writes
  to the console itself.
"""

import logging

STAGES = ('read', 'subset', 'reproject', 'crop', 'qaqc', 'mask', 'overlay',
  'write')

def log_progress(stage, message):
  logging.info('[%s] %s', stage, message)

def print_progress(stage, message):
  """ Console reporter used by the command line driver in verbose mode """
  print(message)
  log_progress(stage, message)
