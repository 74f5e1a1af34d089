"""Vessel audit: compare internal vessel records with a third-party vessel API."""

__version__ = "0.1.0"
