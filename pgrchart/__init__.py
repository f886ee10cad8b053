"""Phigros-style chart conversion and engine resource packaging."""

__version__ = "0.1.0"