"""Sample data and fixtures."""

from data.sample_office import DEFAULT_ROOMS

__all__ = ["DEFAULT_ROOMS"]
