"""Ceasefire: conflict mediation API."""

__version__ = '0.1.0'
