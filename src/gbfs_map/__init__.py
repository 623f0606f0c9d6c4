"""GBFS map: geofencing zone precedence and zoom-adaptive station rendering."""

__version__ = "0.1.0"
