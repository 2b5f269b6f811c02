"""
Preference persistence.
"""

from .connection import Database, db
from .preferences import PreferenceStore

__all__ = ['Database', 'db', 'PreferenceStore']
