"""Fitlog: fitness tracking API with Garmin Connect import."""

__version__ = "0.3.0"
