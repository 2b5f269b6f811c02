"""FastAPI main application."""

import logging
from typing import List, Optional

import structlog
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..core.hierarchy import TreeNode
from ..core.search import search_nodes
from ..core.session import MapSession
from ..db.connection import db
from ..db.preferences import PreferenceStore
from ..vault.file_ops import OperationResult, create_note, move_node, rename_node
from ..vault.scanner import scan_vault_if_exists
from ..vault.sync import VaultSync
from .export import cells_to_feature_collection
from .models import (
    ActivateResponse, Breadcrumb, BreadcrumbRequest, CreateNoteRequest,
    MapViewResponse, MoveRequest, NavigationResponse, NodeRequest, NodeSummary,
    OpenVaultRequest, OperationResponse, PointerRequest, RenameRequest, SearchResultModel,
    ZoomRequest, map_view_response,
)

# Configure logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        (structlog.dev.ConsoleRenderer() if settings.log_format == "plain"
         else structlog.processors.JSONRenderer()),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

DEFAULT_WIDTH = 1200
DEFAULT_HEIGHT = 800

# Initialize FastAPI app
app = FastAPI(
    title="Vault Atlas API",
    description="Spatial map of a Markdown vault",
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # The renderer runs on localhost
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AppState:
    """The session, its rescan loop and the optional preference store."""

    def __init__(self):
        self.session = MapSession()
        self.sync = VaultSync(self.session)
        self.preferences: Optional[PreferenceStore] = None
        self.background = False


state = AppState()


def reset_state() -> AppState:
    """Replace the application state with a fresh one (used by tests)."""
    global state
    state = AppState()
    return state


def _save_preferences() -> None:
    if state.preferences is None:
        return
    try:
        state.preferences.save_all(state.session.to_preferences())
    except Exception as e:
        logger.error("Failed to save preferences", error=str(e))


def _require_vault() -> None:
    if state.session.snapshot is None:
        raise HTTPException(status_code=409, detail="No vault open")


def _require_node(node_id: str) -> TreeNode:
    _require_vault()
    node = state.session.node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail="Node not found")
    return node


def _navigation_response() -> NavigationResponse:
    session = state.session
    return NavigationResponse(
        depth=session.depth,
        path=[NodeSummary.from_node(n) for n in session.path],
        breadcrumbs=[Breadcrumb(label=label, index=i) for label, i in session.breadcrumbs()],
    )


async def _after_mutation(result: OperationResult) -> OperationResponse:
    """Rescan after a successful file operation; surface failures as 400."""
    if not result.success:
        state.session.error = result.error
        raise HTTPException(status_code=400, detail=result.error or "Operation failed")
    await state.sync.rescan()
    return OperationResponse(success=True)


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Initialize preferences, reopen the last vault and start rescanning."""
    logger.info("Starting Vault Atlas API")
    db.initialize()
    state.preferences = PreferenceStore(db)
    prefs = state.preferences.load_all()

    session = state.session
    session.language = prefs["language"]
    session.camera = session.camera.updated(**prefs["camera"])
    state.background = True
    if prefs["vault_path"] and await state.sync.rescan(prefs["vault_path"]):
        session.restore_path(prefs["navigation"])
        state.sync.start()
    logger.info("API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the rescan loop and persist preferences."""
    logger.info("Shutting down Vault Atlas API")
    await state.sync.stop()
    _save_preferences()


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Vault Atlas API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    snapshot = state.session.snapshot
    return {
        "status": "healthy",
        "vault": snapshot.vault_name if snapshot else None,
        "scanned_at": snapshot.scanned_at if snapshot else None,
    }


@app.post("/vault/open", response_model=NavigationResponse)
async def open_vault(request: OpenVaultRequest):
    """Scan a vault folder and make it the current vault."""
    snapshot = scan_vault_if_exists(request.path)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Vault folder not found")
    state.session.set_snapshot(snapshot)
    state.session.error = None
    if state.background:
        state.sync.start()
    _save_preferences()
    return _navigation_response()


@app.post("/vault/rescan", response_model=NavigationResponse)
async def rescan_vault():
    """Rescan the current vault now."""
    _require_vault()
    if not await state.sync.rescan():
        raise HTTPException(status_code=503, detail=state.session.error or "Vault scan failed.")
    return _navigation_response()


@app.get("/map", response_model=MapViewResponse)
async def get_map(width: float = Query(DEFAULT_WIDTH, gt=0), height: float = Query(DEFAULT_HEIGHT, gt=0)):
    """Planets at the root, Voronoi cells inside a region."""
    session = state.session
    view = session.view(width, height)
    vault_name = session.snapshot.vault_name if session.snapshot else None
    return map_view_response(view, vault_name, session.error)


@app.get("/map/geojson")
async def get_map_geojson(width: float = Query(DEFAULT_WIDTH, gt=0), height: float = Query(DEFAULT_HEIGHT, gt=0)):
    """Cells of the current region as a GeoJSON FeatureCollection."""
    return cells_to_feature_collection(state.session.view(width, height).cells)


@app.get("/navigation", response_model=NavigationResponse)
async def get_navigation():
    return _navigation_response()


@app.post("/navigation/drill", response_model=NavigationResponse)
async def drill_down(request: NodeRequest):
    node = _require_node(request.node_id)
    if not state.session.drill_down(node):
        raise HTTPException(status_code=409, detail="Node has no children")
    return _navigation_response()


@app.post("/navigation/back", response_model=NavigationResponse)
async def go_back():
    state.session.go_back()
    return _navigation_response()


@app.post("/navigation/index", response_model=NavigationResponse)
async def navigate_to_index(request: BreadcrumbRequest):
    state.session.navigate_to_index(request.index)
    return _navigation_response()


@app.post("/navigation/jump", response_model=NavigationResponse)
async def jump_to(request: NodeRequest):
    """Jump to any node; unknown ids leave the path unchanged."""
    _require_vault()
    node = state.session.node(request.node_id)
    if node is not None:
        state.session.jump_to(node)
    return _navigation_response()


@app.post("/nodes/{node_id:path}/activate", response_model=ActivateResponse)
async def activate_node(node_id: str):
    """Click on a node: enter a group, or get the URL that opens a note."""
    node = _require_node(node_id)
    url = state.session.activate(node)
    if url is not None:
        return ActivateResponse(action="open", url=url)
    if node.is_empty:
        return ActivateResponse(action="none")
    return ActivateResponse(action="drill", navigation=_navigation_response())


@app.get("/search", response_model=List[SearchResultModel])
async def search(q: str = Query(..., min_length=1), limit: int = Query(50, ge=1, le=200)):
    results = search_nodes(state.session.roots, q, limit)
    return [
        SearchResultModel(
            node=NodeSummary.from_node(r.node),
            path_descriptor=r.path_descriptor,
            match_score=r.match_score,
            is_folder=r.is_folder,
        )
        for r in results
    ]


@app.post("/files/rename", response_model=OperationResponse)
async def rename_file(request: RenameRequest):
    node = _require_node(request.node_id)
    return await _after_mutation(rename_node(node.absolute_path, request.new_name))


@app.post("/files/create", response_model=OperationResponse)
async def create_file(request: CreateNoteRequest):
    _require_vault()
    if request.folder_id is not None:
        folder_path = _require_node(request.folder_id).absolute_path
    elif state.session.current_node is not None:
        folder_path = state.session.current_node.absolute_path
    else:
        folder_path = state.session.vault_path
    return await _after_mutation(create_note(folder_path, request.name))


@app.post("/files/move", response_model=OperationResponse)
async def move_file(request: MoveRequest):
    source = _require_node(request.source_id)
    target = _require_node(request.target_id)
    if target.is_document:
        raise HTTPException(status_code=400, detail="Target must be a folder")
    response = await _after_mutation(move_node(source.absolute_path, target.absolute_path))
    state.session.unstash_node(source.id)
    return response


def _camera_dict() -> dict:
    camera = state.session.camera
    return {"x": camera.x, "y": camera.y, "scale": camera.scale}


@app.post("/camera/zoom")
async def zoom(request: ZoomRequest):
    state.session.zoom(request.delta)
    return _camera_dict()


@app.post("/camera/pan/start")
async def pan_start(request: PointerRequest):
    state.session.begin_pan(request.x, request.y)
    return _camera_dict()


@app.post("/camera/pan/move")
async def pan_move(request: PointerRequest):
    state.session.pan_to(request.x, request.y)
    return _camera_dict()


@app.post("/camera/pan/end")
async def pan_end():
    """End the pan; ``did_pan`` tells the client to ignore the following click."""
    return {"did_pan": state.session.end_pan(), **_camera_dict()}


@app.get("/stash", response_model=List[NodeSummary])
async def get_stash():
    return [NodeSummary.from_node(n) for n in state.session.stash]


@app.post("/stash", response_model=List[NodeSummary])
async def stash_node(request: NodeRequest):
    node = _require_node(request.node_id)
    state.session.stash_node(node)
    return [NodeSummary.from_node(n) for n in state.session.stash]


@app.delete("/stash/{node_id:path}", response_model=List[NodeSummary])
async def unstash_node(node_id: str):
    state.session.unstash_node(node_id)
    return [NodeSummary.from_node(n) for n in state.session.stash]


@app.delete("/error")
async def clear_error():
    """Dismiss the transient error message."""
    state.session.error = None
    return {"error": None}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port,
                log_level="debug" if settings.debug else settings.log_level.lower())
