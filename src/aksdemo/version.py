"""Version information for aksdemo."""

__version__ = "0.3.0"
