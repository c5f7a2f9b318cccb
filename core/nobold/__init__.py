"""Nobold - model manager for a local KoboldCpp install."""

__version__ = "0.1.0"
