from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="VAULT_ATLAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Vault synchronisation
    rescan_interval_seconds: float = Field(default=30.0, gt=0, description="Background rescan interval")
    max_folder_depth: int = Field(default=3, ge=1, description="Deepest folder level turned into a region")
    preview_bytes: int = Field(default=4096, gt=0, description="Bytes read from each note for color, preview and links")

    # Interaction timing
    drag_hold_delay_ms: int = Field(default=250, ge=0, description="Press-and-hold delay before a node is picked up")
    drag_distance_px: float = Field(default=10.0, ge=0, description="Pointer travel that picks a node up immediately")
    pan_threshold_px: float = Field(default=5.0, ge=0, description="Pointer travel that turns a click into a pan")

    # Tessellation
    seed_attempts: int = Field(default=500, ge=1, description="Rejection-sampling attempts per seed point")
    circle_segments: int = Field(default=64, ge=3, description="Vertices of the planet boundary polygon")
    planet_radius_fraction: float = Field(default=0.42, gt=0, description="Planet radius as a fraction of min(width, height)")
    foreign_link_fraction: float = Field(default=0.95, gt=0, description="Foreign link endpoint as a fraction of the planet radius")
    min_cell_area: float = Field(default=1.0, ge=0, description="Cells below this area (coordinate units squared) are dropped")
    intersection_epsilon: float = Field(default=1e-10, gt=0, description="Determinant below which edges count as parallel")
    area_epsilon: float = Field(default=1e-6, ge=0, description="Tolerance for area conservation checks")

    # Camera
    min_zoom: float = Field(default=0.2, gt=0, description="Smallest camera scale")
    max_zoom: float = Field(default=8.0, gt=0, description="Largest camera scale")

    # Persistence
    database_url: str = Field(default="sqlite:///vault_atlas.db", description="Preference store URL")

    # API Configuration
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")


# Instantiate singleton settings object
settings = Settings()
