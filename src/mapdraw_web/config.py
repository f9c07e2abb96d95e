"""Configuration management using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "mapdraw"
    debug: bool = False

    # Durable storage (one JSON object holding both slots)
    storage_path: Path = Path("./data/mapdraw.json")

    # Initial draw style
    draw_color: str = "#f70202"
    draw_weight: float = 4.0
    draw_opacity: float = 0.65

    # Circle markers drawn without an explicit radius (pixels)
    circle_marker_radius: float = 10.0

    # Marker clustering
    cluster_radius_px: float = 80.0

    # Export
    export_filename: str = "data.geojson"


settings = Settings()
