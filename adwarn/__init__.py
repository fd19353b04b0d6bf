"""REDEMET aerodrome warning monitor."""

__version__ = "0.1.0"
