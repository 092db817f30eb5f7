"""Yieldscope: suburb rental-yield dashboard core."""

__version__ = "0.1.0"
