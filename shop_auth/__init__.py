"""Persistence adapters for the ShopDemo authentication subsystem."""

__version__ = "0.1.0"
