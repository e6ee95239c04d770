"""Bulle Chart: weighted comparison of professions."""

__version__ = "2.0.0"
