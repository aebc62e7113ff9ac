"""Domains shipped with dreamegg."""

from .simple import Int, List, SimpleDomain

__all__ = ["Int", "List", "SimpleDomain"]
