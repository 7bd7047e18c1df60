"""Bench management toolkit: resource mapping, derivations and match scoring."""

__version__ = "0.3.0"
