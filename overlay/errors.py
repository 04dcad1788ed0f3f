"""errors.py

  Exceptions raised while building the RGM-VIC overlay for a basin.
  Each class carries a severity used when a basin run is reported back to
  a batch driver.
"""

__all__ = ['OverlayError', 'ConfigurationError', 'DataError']

class OverlayError(Exception):
  severity = 'ERROR'

class ConfigurationError(OverlayError):
  """A required input is missing, a parameter is invalid, or no cells match
    the requested basin.
  """
  severity = 'ERROR'

class DataError(OverlayError):
  """The input data are inconsistent with each other (DEM/polygon geometry or
    CRS mismatch, cell ids absent from the polygons, malformed grid files).
  """
  severity = 'WARNING'
