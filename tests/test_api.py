"""
Tests for the atlas API endpoints.
"""

import shutil

from fastapi.testclient import TestClient

from vault_atlas.api import main
from vault_atlas.api.main import app


class TestAPIBase:
    """Fresh application state and an open-vault helper."""

    def setup_method(self):
        """Set up test client."""
        main.reset_state()
        self.client = TestClient(app)

    def open_vault(self, path):
        response = self.client.post("/vault/open", json={"path": str(path)})
        assert response.status_code == 200
        return response.json()


class TestGeneralEndpoints(TestAPIBase):

    def test_root(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health_without_vault(self):
        data = self.client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["vault"] is None

    def test_clear_error(self):
        main.state.session.error = "boom"
        assert self.client.delete("/error").json() == {"error": None}
        assert main.state.session.error is None


class TestVaultEndpoints(TestAPIBase):

    def test_open_vault(self, vault_dir):
        data = self.open_vault(vault_dir)
        assert data["depth"] == 0
        assert data["breadcrumbs"] == [{"label": "Cosmos", "index": -1}]
        assert self.client.get("/health").json()["vault"] == "Cosmos"

    def test_open_missing_vault(self, tmp_path):
        response = self.client.post("/vault/open", json={"path": str(tmp_path / "missing")})
        assert response.status_code == 404

    def test_rescan_requires_vault(self):
        assert self.client.post("/vault/rescan").status_code == 409

    def test_rescan_picks_up_changes(self, vault_dir):
        self.open_vault(vault_dir)
        (vault_dir / "Venus").mkdir()
        assert self.client.post("/vault/rescan").status_code == 200
        planets = self.client.get("/map").json()["planets"]
        assert "Venus" in [p["node"]["name"] for p in planets]

    def test_rescan_of_deleted_vault_keeps_snapshot(self, vault_dir):
        self.open_vault(vault_dir)
        shutil.rmtree(vault_dir)
        response = self.client.post("/vault/rescan")
        assert response.status_code == 503
        assert self.client.get("/map").json()["error"] == "Vault scan failed."
        assert self.client.get("/health").json()["vault"] == "Cosmos"


class TestMapEndpoints(TestAPIBase):

    def test_map_without_vault(self):
        data = self.client.get("/map").json()
        assert data["vault_name"] is None
        assert data["planets"] == []

    def test_solar_system(self, vault_dir):
        self.open_vault(vault_dir)
        data = self.client.get("/map", params={"width": 1200, "height": 800}).json()
        assert data["depth"] == 0
        assert [p["node"]["name"] for p in data["planets"]] == ["Earth", "Loose", "Mars"]
        assert data["planets"][0]["cx"] == 600
        assert data["cells"] == []
        assert data["region"] is None
        links = data["planet_links"]
        assert all(link["count"] > 0 for link in links)

    def test_planet_view(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/navigation/jump", json={"node_id": "Earth/Europe"})
        data = self.client.get("/map").json()
        assert data["depth"] == 2
        assert data["region"]["cx"] == 600
        names = [cell["node"]["name"] for cell in data["cells"]]
        assert names == ["Berlin", "Paris"]
        for cell in data["cells"]:
            assert len(cell["polygon"]) >= 3
            assert 7 <= cell["label_size"] <= 22
        local = [link for link in data["links"] if not link["is_foreign"]]
        assert len(local) == 2

    def test_invalid_viewport(self):
        assert self.client.get("/map", params={"width": 0}).status_code == 422

    def test_geojson(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/navigation/drill", json={"node_id": "Earth"})
        data = self.client.get("/map/geojson").json()
        assert data["type"] == "FeatureCollection"
        assert len(data["features"]) == 2
        feature = data["features"][0]
        assert feature["geometry"]["type"] == "Polygon"
        assert feature["properties"]["id"] == "Earth/Europe"


class TestNavigationEndpoints(TestAPIBase):

    def test_drill_and_back(self, vault_dir):
        self.open_vault(vault_dir)
        data = self.client.post("/navigation/drill", json={"node_id": "Earth"}).json()
        assert [n["id"] for n in data["path"]] == ["Earth"]
        data = self.client.post("/navigation/drill", json={"node_id": "Earth/Europe"}).json()
        assert data["depth"] == 2
        assert [b["label"] for b in data["breadcrumbs"]] == ["Cosmos", "Earth", "Europe"]
        data = self.client.post("/navigation/back").json()
        assert data["depth"] == 1
        data = self.client.post("/navigation/index", json={"index": -1}).json()
        assert data["depth"] == 0

    def test_drill_into_document_rejected(self, vault_dir):
        self.open_vault(vault_dir)
        assert self.client.post("/navigation/drill", json={"node_id": "Loose.md"}).status_code == 409

    def test_drill_unknown_node(self, vault_dir):
        self.open_vault(vault_dir)
        assert self.client.post("/navigation/drill", json={"node_id": "Venus"}).status_code == 404

    def test_drill_without_vault(self):
        assert self.client.post("/navigation/drill", json={"node_id": "Earth"}).status_code == 409

    def test_index_below_root_rejected(self, vault_dir):
        self.open_vault(vault_dir)
        assert self.client.post("/navigation/index", json={"index": -2}).status_code == 422

    def test_jump_to_document(self, vault_dir):
        self.open_vault(vault_dir)
        data = self.client.post("/navigation/jump", json={"node_id": "Earth/Europe/Paris.md"}).json()
        assert [n["id"] for n in data["path"]] == ["Earth", "Earth/Europe"]

    def test_jump_to_top_level_document(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/navigation/drill", json={"node_id": "Mars"})
        data = self.client.post("/navigation/jump", json={"node_id": "Loose.md"}).json()
        assert data["path"] == []
        assert data["depth"] == 0

    def test_jump_unknown_is_noop(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/navigation/drill", json={"node_id": "Mars"})
        data = self.client.post("/navigation/jump", json={"node_id": "Venus"}).json()
        assert [n["id"] for n in data["path"]] == ["Mars"]

    def test_activate_document(self, vault_dir):
        self.open_vault(vault_dir)
        data = self.client.post("/nodes/Earth/Europe/Paris.md/activate").json()
        assert data["action"] == "open"
        assert data["url"] == "obsidian://open?vault=Cosmos&file=Earth%2FEurope%2FParis.md"

    def test_activate_group(self, vault_dir):
        self.open_vault(vault_dir)
        data = self.client.post("/nodes/Earth/activate").json()
        assert data["action"] == "drill"
        assert data["navigation"]["depth"] == 1

    def test_search(self, vault_dir):
        self.open_vault(vault_dir)
        results = self.client.get("/search", params={"q": "paris"}).json()
        assert results[0]["node"]["id"] == "Earth/Europe/Paris.md"
        assert results[0]["match_score"] == 100
        assert results[0]["path_descriptor"] == "Earth / Europe"
        assert results[0]["is_folder"] is False

    def test_search_requires_query(self):
        assert self.client.get("/search", params={"q": ""}).status_code == 422


class TestFileEndpoints(TestAPIBase):

    def test_create_note_in_current_region(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/navigation/drill", json={"node_id": "Mars"})
        response = self.client.post("/files/create", json={"name": "Moon"})
        assert response.json() == {"success": True, "error": None}
        assert (vault_dir / "Mars" / "Moon.md").exists()
        names = [c["node"]["name"] for c in self.client.get("/map").json()["cells"]]
        assert "Moon" in names

    def test_create_note_at_root(self, vault_dir):
        self.open_vault(vault_dir)
        assert self.client.post("/files/create", json={"name": "Idea"}).status_code == 200
        assert (vault_dir / "Idea.md").exists()

    def test_create_duplicate_fails(self, vault_dir):
        self.open_vault(vault_dir)
        response = self.client.post("/files/create", json={"name": "Loose"})
        assert response.status_code == 400

    def test_rename(self, vault_dir):
        self.open_vault(vault_dir)
        response = self.client.post("/files/rename", json={"node_id": "Earth/Notes.md", "new_name": "Journal.md"})
        assert response.status_code == 200
        assert (vault_dir / "Earth" / "Journal.md").exists()
        assert self.client.post("/navigation/jump", json={"node_id": "Earth/Journal.md"}).json()["depth"] == 1

    def test_rename_clash(self, vault_dir):
        self.open_vault(vault_dir)
        response = self.client.post("/files/rename", json={"node_id": "Loose.md", "new_name": "Mars"})
        assert response.status_code == 400
        assert self.client.get("/map").json()["error"]

    def test_move(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/stash", json={"node_id": "Mars/Rover.md"})
        response = self.client.post("/files/move", json={"source_id": "Mars/Rover.md", "target_id": "Earth"})
        assert response.status_code == 200
        assert (vault_dir / "Earth" / "Rover.md").exists()
        assert self.client.get("/stash").json() == []

    def test_move_onto_document_rejected(self, vault_dir):
        self.open_vault(vault_dir)
        response = self.client.post("/files/move", json={"source_id": "Mars", "target_id": "Loose.md"})
        assert response.status_code == 400
        assert (vault_dir / "Mars").is_dir()


class TestSessionEndpoints(TestAPIBase):

    def test_zoom_clamped(self):
        data = self.client.post("/camera/zoom", json={"delta": 100}).json()
        assert data["scale"] == 8.0
        data = self.client.post("/camera/zoom", json={"delta": 0.0001}).json()
        assert data["scale"] == 0.2

    def test_zoom_rejects_non_positive(self):
        assert self.client.post("/camera/zoom", json={"delta": 0}).status_code == 422

    def test_stash(self, vault_dir):
        self.open_vault(vault_dir)
        stash = self.client.post("/stash", json={"node_id": "Mars"}).json()
        assert [n["id"] for n in stash] == ["Mars"]
        stash = self.client.post("/stash", json={"node_id": "Mars"}).json()
        assert len(stash) == 1
        assert self.client.delete("/stash/Mars").json() == []

    def test_stash_nested_id(self, vault_dir):
        self.open_vault(vault_dir)
        self.client.post("/stash", json={"node_id": "Earth/Europe/Paris.md"})
        assert self.client.delete("/stash/Earth/Europe/Paris.md").json() == []

    def test_pan(self):
        self.client.post("/camera/pan/start", json={"x": 0, "y": 0})
        data = self.client.post("/camera/pan/move", json={"x": 30, "y": -10}).json()
        assert (data["x"], data["y"]) == (-30.0, 10.0)
        assert self.client.post("/camera/pan/end").json()["did_pan"] is True
