"""Builds the static Regional Glaciation Model (RGM) input files for a VIC
  sub-basin by overlaying RGM DEM pixels on the VIC computational grid.
"""
