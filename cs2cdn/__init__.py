"""cs2cdn: keep a local mirror of CS2 economy images up to date."""

__version__ = "0.3.0"
