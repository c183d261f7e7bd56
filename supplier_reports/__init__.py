"""Supplier debt and payment report engine."""

__version__ = "0.1.0"
