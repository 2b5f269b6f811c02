"""
Filesystem collaborators: vault scanning, file operations, rescan loop.
"""

from .file_ops import OperationResult, create_note, move_node, rename_node
from .obsidian import build_obsidian_url
from .scanner import scan_vault, scan_vault_if_exists

__all__ = ['OperationResult', 'create_note', 'move_node', 'rename_node',
           'build_obsidian_url', 'scan_vault', 'scan_vault_if_exists']
