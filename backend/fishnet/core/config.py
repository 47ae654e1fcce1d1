from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_BACKEND_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    app_name: str = "FishNet API"
    api_prefix: str = "/api"
    cors_origins: list[str] = ["*"]

    model_dir: Path = _BACKEND_ROOT / "trained_models" / "fishnet"
    species_model_name: str = "fish_species"
    disease_model_name: str = "fish_disease"
    image_size: int = 224
    device: str = "cpu"

    max_upload_bytes: int = 5 * 1024 * 1024
    # Logs candidate rankings and override decisions for every analysis.
    debug_diagnostics: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "FISHNET_"
        protected_namespaces = ()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
