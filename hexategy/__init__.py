"""HexaTegy: authoritative coordinator for a hex-grid territory conquest game."""

__version__ = "0.3.0"
