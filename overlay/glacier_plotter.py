from matplotlib.figure import Figure
from mpl_toolkits.axes_grid1 import make_axes_locatable

from overlay.params import GLACIER_THICKNESS_THRESHOLD

def _add_panel(fig, position, title, grid):
  sub = fig.add_subplot(position)
  sub.set_title(title)
  sub.set_xticks([])
  sub.set_yticks([])
  sub.set_frame_on(True)
  # values are stored north first
  img = sub.imshow(grid, origin='upper')
  divider = make_axes_locatable(sub)
  cax = divider.append_axes("right", size="5%", pad=0.05)
  fig.colorbar(img, cax=cax)
  return sub

def plot_overlay(surface, bed, glacier_mask, title, filename,
  glacier_thickness_threshold=GLACIER_THICKNESS_THRESHOLD):
  """ Saves a figure of the cropped surface DEM, glacier mask and glacier
    thickness of a basin to filename
  """
  fig = Figure(figsize=(16,12))
  _add_panel(fig, 131, 'Surface DEM ' + title, surface.values)
  _add_panel(fig, 132, 'Glacier Mask ' + title, glacier_mask.values)
  _add_panel(fig, 133, 'Glacier Thickness ' + title,
    surface.values - glacier_thickness_threshold - bed.values)
  fig.tight_layout()
  fig.savefig(filename, dpi=fig.dpi)
  return fig
