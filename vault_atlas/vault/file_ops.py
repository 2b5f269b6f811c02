"""
Structural file operations.

Each operation reports failure through an OperationResult instead of
raising, and never touches the in-memory tree: callers rescan afterwards.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class OperationResult:
    success: bool
    error: Optional[str] = None


def rename_node(old_path: str, new_name: str) -> OperationResult:
    """Rename a file or folder within its parent folder."""
    try:
        source = Path(old_path)
        target = source.parent / new_name
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        os.rename(source, target)
        logger.info("Node renamed", source=str(source), target=str(target))
        return OperationResult(success=True)
    except OSError as e:
        logger.warning("Rename failed", path=old_path, error=str(e))
        return OperationResult(success=False, error=str(e))


def create_note(folder_path: str, note_name: str) -> OperationResult:
    """Create an empty Markdown note, adding the ``.md`` suffix if missing."""
    try:
        filename = note_name if note_name.endswith(".md") else f"{note_name}.md"
        target = Path(folder_path) / filename
        with open(target, "x", encoding="utf-8"):
            pass
        logger.info("Note created", path=str(target))
        return OperationResult(success=True)
    except OSError as e:
        logger.warning("Note creation failed", folder=folder_path, error=str(e))
        return OperationResult(success=False, error=str(e))


def move_node(source_path: str, target_folder_path: str) -> OperationResult:
    """Move a file or folder into another folder, keeping its name."""
    try:
        source = Path(source_path)
        target = Path(target_folder_path) / source.name
        if not Path(target_folder_path).is_dir():
            raise NotADirectoryError(f"{target_folder_path} is not a folder")
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        os.rename(source, target)
        logger.info("Node moved", source=str(source), target=str(target))
        return OperationResult(success=True)
    except OSError as e:
        logger.warning("Move failed", source=source_path, target=target_folder_path, error=str(e))
        return OperationResult(success=False, error=str(e))
