"""NiceGUI rendering of the grid workspace."""

from gridbase.ui.grid_view import GridView

__all__ = ["GridView"]
