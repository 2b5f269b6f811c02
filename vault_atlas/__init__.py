"""
Vault Atlas: spatial map of a Markdown vault.

Folders become planets and regions, documents become Voronoi cells.
"""

__version__ = "0.1.0"
