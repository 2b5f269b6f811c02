"""
Vault scanner: builds a TreeSnapshot from a folder of Markdown notes.

Rules:
- Entries whose name starts with "." are skipped
- Folders at depth 1, 2 and 3 become groups; deeper folders are ignored
- ``.md`` files become documents at any depth
- Entries are visited in sorted name order so sibling order is stable
"""

import os
import re
import time
from pathlib import Path
from typing import List, Optional, Tuple

import structlog

from ..config import settings
from ..core.hierarchy import DOCUMENT_MIN_WEIGHT, DocumentNode, GroupNode, TreeNode, TreeSnapshot
from ..core.palette import TAG_COLORS

logger = structlog.get_logger()

HIDDEN_PREFIX = "."
MARKDOWN_SUFFIX = ".md"
PREVIEW_LINES = 3
PREVIEW_CHARS = 150

FRONTMATTER_RE = re.compile(r"^---\n[\s\S]*?\n---\n")
COLOR_RE = re.compile(r"^color:\s*['\"]?([^'\"\n]+)['\"]?", re.MULTILINE)
TAG_RE = re.compile(r"#[a-zA-Z0-9_-]+")
LINK_RE = re.compile(r"\[\[(.*?)\]\]")


def is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def extract_color(content: str) -> Optional[str]:
    """Front-matter style ``color:`` line, else the first known color tag."""
    match = COLOR_RE.search(content)
    if match:
        return match.group(1).strip()
    for tag in TAG_RE.findall(content):
        color = TAG_COLORS.get(tag.lower())
        if color:
            return color
    return None


def extract_preview(content: str, count: int = PREVIEW_LINES) -> str:
    """First non-empty lines after the front matter, joined and capped."""
    body = FRONTMATTER_RE.sub("", content, count=1)
    lines = [line.strip() for line in body.split("\n")]
    lines = [line for line in lines if line]
    return " ".join(lines[:count])[:PREVIEW_CHARS]


def extract_links(content: str) -> List[str]:
    """``[[target|alias]]`` -> ``target``, in order of appearance."""
    links = []
    for raw in LINK_RE.findall(content):
        target = raw.split("|")[0].strip()
        if target:
            links.append(target)
    return links


def parse_markdown_node(full_path: Path, rel_path: str, size: int,
                        preview_bytes: int) -> DocumentNode:
    """Build a document node from the head of a note."""
    color = None
    preview = ""
    links: List[str] = []

    try:
        with open(full_path, "rb") as f:
            head = f.read(preview_bytes)
        if head:
            content = head.decode("utf-8", errors="replace")
            color = extract_color(content)
            preview = extract_preview(content)
            links = extract_links(content)
    except OSError as e:
        logger.warning("Failed to parse markdown node", path=str(full_path), error=str(e))

    return DocumentNode(
        id=rel_path,
        name=full_path.name[:-len(MARKDOWN_SUFFIX)],
        weight=max(DOCUMENT_MIN_WEIGHT, size),
        color=color,
        links=tuple(links),
        absolute_path=str(full_path),
        relative_path=rel_path,
        preview=preview,
    )


def _sorted_entries(dir_path: Path) -> List[str]:
    try:
        return sorted(os.listdir(dir_path))
    except OSError:
        return []


def scan_directory(dir_path: Path, vault_path: Path, depth: int,
                   max_depth: int, preview_bytes: int) -> Tuple[TreeNode, ...]:
    """Children of ``dir_path``, which sits at folder depth ``depth - 1``."""
    nodes: List[TreeNode] = []

    for entry in _sorted_entries(dir_path):
        if is_hidden(entry):
            continue

        full_path = dir_path / entry
        try:
            stat = full_path.stat()
        except OSError:
            continue

        rel_path = full_path.relative_to(vault_path).as_posix()

        if full_path.is_dir():
            if depth > max_depth:
                continue
            children = scan_directory(full_path, vault_path, depth + 1, max_depth, preview_bytes)
            nodes.append(GroupNode.from_children(
                id=rel_path,
                name=entry,
                depth=depth,
                children=children,
                absolute_path=str(full_path),
            ))
        elif entry.lower().endswith(MARKDOWN_SUFFIX):
            nodes.append(parse_markdown_node(full_path, rel_path, stat.st_size, preview_bytes))

    return tuple(nodes)


def scan_vault(vault_path: str, max_depth: Optional[int] = None,
               preview_bytes: Optional[int] = None) -> TreeSnapshot:
    """
    Scan a vault folder.

    Args:
        vault_path: Root folder of the vault
        max_depth: Deepest folder level kept (defaults to settings)
        preview_bytes: Bytes read from each note (defaults to settings)

    Returns:
        A new TreeSnapshot
    """
    root = Path(vault_path)
    start = time.time()
    roots = scan_directory(
        root, root, 1,
        settings.max_folder_depth if max_depth is None else max_depth,
        settings.preview_bytes if preview_bytes is None else preview_bytes,
    )
    snapshot = TreeSnapshot(
        vault_path=str(root),
        vault_name=root.name,
        scanned_at=int(time.time() * 1000),
        roots=roots,
    )
    logger.info("Vault scanned", vault=snapshot.vault_name, top_level=len(roots),
                seconds=round(time.time() - start, 3))
    return snapshot


def scan_vault_if_exists(vault_path: str) -> Optional[TreeSnapshot]:
    """Like scan_vault, but None when the folder does not exist."""
    if not Path(vault_path).is_dir():
        logger.warning("Vault path missing", path=vault_path)
        return None
    return scan_vault(vault_path)
