"""HTTP facade for bulk Discord guild administration."""

__version__ = "0.1.0"
