"""Hand-off URLs for opening notes in Obsidian."""

from urllib.parse import quote


def build_obsidian_url(vault_name: str, file_path: str) -> str:
    """``obsidian://open`` URL for a note, both parameters percent-encoded."""
    return f"obsidian://open?vault={quote(vault_name, safe='')}&file={quote(file_path, safe='')}"
