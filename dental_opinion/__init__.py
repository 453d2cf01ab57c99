"""Dental scan second opinion service."""

__version__ = "0.1.0"
