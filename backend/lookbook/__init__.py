"""Outfit assembly and de-duplication engine."""

__version__ = "1.0.0"
