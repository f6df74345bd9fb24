"""
Rendering adapter: turns an aligned series set into a line chart or image bytes.
"""

from runcompare.render.chart import export_image, render_figure
from runcompare.render.colors import assign_colors

__all__ = ["assign_colors", "export_image", "render_figure"]
