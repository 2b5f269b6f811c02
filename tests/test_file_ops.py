"""Tests for structural file operations."""

from vault_atlas.vault.file_ops import create_note, move_node, rename_node


class TestRenameNode:
    """Test renaming files and folders."""

    def test_rename_file(self, tmp_path):
        (tmp_path / "old.md").write_text("x", encoding="utf-8")
        result = rename_node(str(tmp_path / "old.md"), "new.md")
        assert result.success
        assert result.error is None
        assert (tmp_path / "new.md").read_text(encoding="utf-8") == "x"
        assert not (tmp_path / "old.md").exists()

    def test_rename_folder(self, tmp_path):
        (tmp_path / "Old").mkdir()
        assert rename_node(str(tmp_path / "Old"), "New").success
        assert (tmp_path / "New").is_dir()

    def test_existing_target_fails(self, tmp_path):
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "b.md").write_text("b", encoding="utf-8")
        result = rename_node(str(tmp_path / "a.md"), "b.md")
        assert not result.success
        assert result.error
        assert (tmp_path / "b.md").read_text(encoding="utf-8") == "b"

    def test_missing_source_fails(self, tmp_path):
        assert not rename_node(str(tmp_path / "missing.md"), "x.md").success


class TestCreateNote:
    """Test note creation."""

    def test_adds_suffix(self, tmp_path):
        assert create_note(str(tmp_path), "Idea").success
        assert (tmp_path / "Idea.md").read_text(encoding="utf-8") == ""

    def test_keeps_suffix(self, tmp_path):
        assert create_note(str(tmp_path), "Idea.md").success
        assert (tmp_path / "Idea.md").exists()
        assert not (tmp_path / "Idea.md.md").exists()

    def test_existing_note_untouched(self, tmp_path):
        (tmp_path / "Idea.md").write_text("keep", encoding="utf-8")
        result = create_note(str(tmp_path), "Idea")
        assert not result.success
        assert (tmp_path / "Idea.md").read_text(encoding="utf-8") == "keep"

    def test_missing_folder_fails(self, tmp_path):
        assert not create_note(str(tmp_path / "nope"), "Idea").success


class TestMoveNode:
    """Test moving nodes between folders."""

    def test_move_file(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "dst").mkdir()
        (tmp_path / "src" / "note.md").write_text("x", encoding="utf-8")
        assert move_node(str(tmp_path / "src" / "note.md"), str(tmp_path / "dst")).success
        assert (tmp_path / "dst" / "note.md").exists()
        assert not (tmp_path / "src" / "note.md").exists()

    def test_move_folder(self, tmp_path):
        (tmp_path / "Box").mkdir()
        (tmp_path / "Box" / "inner.md").write_text("x", encoding="utf-8")
        (tmp_path / "Shelf").mkdir()
        assert move_node(str(tmp_path / "Box"), str(tmp_path / "Shelf")).success
        assert (tmp_path / "Shelf" / "Box" / "inner.md").exists()

    def test_target_not_a_folder(self, tmp_path):
        (tmp_path / "a.md").write_text("a", encoding="utf-8")
        (tmp_path / "b.md").write_text("b", encoding="utf-8")
        result = move_node(str(tmp_path / "a.md"), str(tmp_path / "b.md"))
        assert not result.success
        assert (tmp_path / "a.md").exists()

    def test_name_clash_fails(self, tmp_path):
        (tmp_path / "dst").mkdir()
        (tmp_path / "note.md").write_text("new", encoding="utf-8")
        (tmp_path / "dst" / "note.md").write_text("old", encoding="utf-8")
        result = move_node(str(tmp_path / "note.md"), str(tmp_path / "dst"))
        assert not result.success
        assert (tmp_path / "dst" / "note.md").read_text(encoding="utf-8") == "old"
