"""Interactive 2D map of a bubble network."""
__version__ = "0.1.0"
