"""Orderflow - prediction market trade log analytics."""

__version__ = "0.1.0"
