"""File storage and thumbnail service."""
__version__ = "1.0.0"
