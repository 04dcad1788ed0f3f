""" This module holds the default settings of an RGM-VIC overlay run and the
  OverlayParams object, which collects every setting that affects the
  processing of one basin. Parameters can be set directly, from the command
  line driver, or read from a parameter file of 'KEY value' lines.
"""

__all__ = ['OverlayParams', 'Scalar', 'Boolean']

from overlay.errors import ConfigurationError

# Reference elevation (bottom of the lowest elevation band) in metres
ZREF = 0.0
# Vertical size of the elevation bands in metres
BAND_SIZE = 200.0
# Areas where surface minus bed elevation exceeds GLACIER_THICKNESS_THRESHOLD
# (in units of meters) are considered to be glacier
GLACIER_THICKNESS_THRESHOLD = 2.0
# Buffer (metres) added around the basin polygons when cropping the DEMs
BUFFER = 0.0
AGGREGATION_FACTOR = 1
# The RGM cannot take zero or negative elevations
MIN_ELEVATION = 0.1

CELL_ID_FIELD = 'CELL_ID'
BASIN_FIELD = 'NAME'

class Scalar(object):
  def __init__(self, type_, default=None):
    self.type_ = type_
    self.default = default
  def __set_name__(self, owner, name):
    self.name = name
  def __set__(self, instance, value):
    if value is not None:
      try:
        value = self.type_(value)
      except (TypeError, ValueError):
        raise ConfigurationError("Cannot convert '{}' to type {} for parameter \
{}".format(value, self.type_.__name__, self.name))
    instance.__dict__[self.name] = value
  def __get__(self, instance, cls):
    if instance is None:
      return self
    return instance.__dict__.get(self.name, self.default)
  def to_str(self, instance):
    value = self.__get__(instance, type(instance))
    if value is None:
      return ''
    return '{} {}\n'.format(self.name.upper(), value)

class Boolean(Scalar):
  def __init__(self, default=False):
    super().__init__(bool, default)
  def __set__(self, instance, value):
    # catch strings which represent 'Falsy' values
    if value in ('FALSE', 'False', 'false', '0'):
      value = False
    super().__set__(instance, value)
  def to_str(self, instance):
    value = 'TRUE' if self.__get__(instance, type(instance)) else 'FALSE'
    return '{} {}\n'.format(self.name.upper(), value)

class OverlayParams(object):
  """Settings of one basin run. Descriptors convert string values, so a
    parameter file and keyword arguments are handled alike.
  """
  zref = Scalar(float, ZREF)
  deltaz = Scalar(float, BAND_SIZE)
  mindep = Scalar(float, GLACIER_THICKNESS_THRESHOLD)
  buffer = Scalar(float, BUFFER)
  aggreg = Scalar(float, AGGREGATION_FACTOR)
  fromtop = Boolean(True)
  # When set, '<refyear>_' is inserted before the basin name in the surface
  # DEM and glacier mask filenames
  refyear = Scalar(int)
  outdir = Scalar(str, '.')
  nomap = Boolean()
  nosurf = Boolean()
  nobed = Boolean()
  nomask = Boolean()

  def __init__(self, **kwargs):
    for name, value in kwargs.items():
      self._set(name, value)
    self.validate()

  @classmethod
  def members(cls):
    return [name for name, value in vars(cls).items()\
      if isinstance(value, Scalar)]

  @classmethod
  def from_file(cls, input_stream, **overrides):
    """ Reads 'KEY value' lines (case-insensitive keys, '#' comments) from an
      open parameter file. Keyword arguments override the file's values.
    """
    params = cls.__new__(cls)
    for line in input_stream:
      if line.isspace() or line.lstrip().startswith('#'):
        continue
      try:
        name, value = line.split(None, 1)
      except ValueError:
        raise ConfigurationError('Parameter {} has no value'\
          .format(line.strip()))
      params._set(name.lower(), value.strip())
    for name, value in overrides.items():
      params._set(name, value)
    params.validate()
    return params

  def _set(self, name, value):
    if name not in self.members():
      raise ConfigurationError('Unknown overlay parameter {}'.format(name))
    setattr(self, name, value)

  def validate(self):
    if self.deltaz <= 0:
      raise ConfigurationError('Band relief deltaz must be positive (got {})'\
        .format(self.deltaz))
    if self.mindep < 0:
      raise ConfigurationError('Glacier depth threshold mindep must not be \
negative (got {})'.format(self.mindep))
    if self.buffer < 0:
      raise ConfigurationError('Buffer must not be negative (got {})'\
        .format(self.buffer))
    if self.aggreg < 1 or self.aggreg != int(self.aggreg):
      raise ConfigurationError('Aggregation factor must be an integer >= 1 \
(got {})'.format(self.aggreg))

  @property
  def aggregation_factor(self):
    return int(self.aggreg)

  def __str__(self):
    cls = self.__class__
    return ''.join(vars(cls)[name].to_str(self) for name in self.members())

  def write(self, filename):
    with open(filename, 'w') as f:
      f.write(str(self))
