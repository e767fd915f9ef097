"""Browser checks for the built documentation examples."""

__version__ = "0.1.0"
