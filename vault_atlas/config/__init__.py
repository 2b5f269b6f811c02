"""
Configuration modules for the atlas.
"""

from .settings import Settings, settings

__all__ = ['Settings', 'settings']
