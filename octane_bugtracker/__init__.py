"""ALM Octane bug tracker integration."""

__version__ = "0.1.0"
