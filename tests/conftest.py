"""Shared fixtures: an in-memory forest and an on-disk vault."""

import pytest

from vault_atlas.core.hierarchy import DocumentNode, GroupNode, NodeIndex, TreeSnapshot


@pytest.fixture
def forest():
    """
    Earth/
      Europe/
        Paris.md     -> [[Berlin]] [[Rover]]
        Berlin.md    -> [[Paris]]
      Asia/          (empty)
      Notes.md
    Mars/
      Rover.md       -> [[Paris]] [[Nowhere]]
    """
    paris = DocumentNode(id="Earth/Europe/Paris.md", name="Paris", links=("Berlin", "Rover"),
                         absolute_path="/vaults/Cosmos/Earth/Europe/Paris.md",
                         relative_path="Earth/Europe/Paris.md")
    berlin = DocumentNode(id="Earth/Europe/Berlin.md", name="Berlin", links=("Paris",),
                          absolute_path="/vaults/Cosmos/Earth/Europe/Berlin.md",
                          relative_path="Earth/Europe/Berlin.md")
    europe = GroupNode.from_children("Earth/Europe", "Europe", 2, [paris, berlin],
                                     absolute_path="/vaults/Cosmos/Earth/Europe")
    asia = GroupNode.from_children("Earth/Asia", "Asia", 2, [],
                                   absolute_path="/vaults/Cosmos/Earth/Asia")
    notes = DocumentNode(id="Earth/Notes.md", name="Notes",
                         absolute_path="/vaults/Cosmos/Earth/Notes.md",
                         relative_path="Earth/Notes.md")
    earth = GroupNode.from_children("Earth", "Earth", 1, [europe, asia, notes],
                                    absolute_path="/vaults/Cosmos/Earth")
    rover = DocumentNode(id="Mars/Rover.md", name="Rover", links=("Paris", "Nowhere"),
                         absolute_path="/vaults/Cosmos/Mars/Rover.md",
                         relative_path="Mars/Rover.md")
    mars = GroupNode.from_children("Mars", "Mars", 1, [rover], absolute_path="/vaults/Cosmos/Mars")
    return (earth, mars)


@pytest.fixture
def index(forest):
    return NodeIndex.from_roots(forest)


@pytest.fixture
def snapshot(forest):
    return TreeSnapshot(vault_path="/vaults/Cosmos", vault_name="Cosmos", scanned_at=0, roots=forest)


@pytest.fixture
def vault_dir(tmp_path):
    """A small vault on disk."""
    root = tmp_path / "Cosmos"
    (root / "Earth" / "Europe").mkdir(parents=True)
    (root / "Earth" / "Europe" / "Paris.md").write_text(
        "---\ncolor: '#123456'\n---\n# Paris\nCity of light\n\nSee [[Berlin]] and [[Rover|the rover]].\n",
        encoding="utf-8",
    )
    (root / "Earth" / "Europe" / "Berlin.md").write_text("Capital #blue\n[[Paris]]\n", encoding="utf-8")
    (root / "Earth" / "Notes.md").write_text("", encoding="utf-8")
    (root / "Earth" / "image.png").write_bytes(b"\x89PNG")
    (root / "Mars").mkdir()
    (root / "Mars" / "Rover.md").write_text("Wheels\n", encoding="utf-8")
    (root / ".obsidian").mkdir()
    (root / ".obsidian" / "app.md").write_text("hidden", encoding="utf-8")
    (root / "Loose.md").write_text("top-level note", encoding="utf-8")
    return root
