"""Mesh Hub render engine — installation plans for packaged mesh applications."""

__version__ = "0.1.0"
