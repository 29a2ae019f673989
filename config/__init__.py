"""
Configuration package for the price monitor.
"""

from .settings import Settings

__all__ = ['Settings']
