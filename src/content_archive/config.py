"""
Centralized configuration for Content Archive.
All parameters in one place, overridable via environment variables.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
import yaml
from pathlib import Path

# Load YAML config if exists
def _load_yaml_config() -> dict:
    """Load config.yaml if it exists, else return empty dict."""
    config_path = Path(__file__).parent.parent.parent / "config.yaml"
    if config_path.exists():
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    return {}

_yaml = _load_yaml_config()

class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # === Storage ===
    data_dir: Path = Field(
        default=Path(_yaml.get('storage', {}).get('data_dir', "data")),
        description="Directory holding archived .md artifacts"
    )
    max_history_items: int = Field(
        default=_yaml.get('storage', {}).get('max_history_items', 50),
        ge=1,
        description="Retention cap: oldest artifacts beyond this are evicted"
    )
    file_suffix: str = Field(
        default=_yaml.get('storage', {}).get('file_suffix', ".md"),
        description="Only files with this suffix count as archived items"
    )

    # === Fetching ===
    request_timeout: int = Field(
        default=_yaml.get('fetch', {}).get('request_timeout', 30),
        gt=0,
        description="HTTP timeout (seconds) for web page fetches"
    )
    user_agent: str = Field(
        default=_yaml.get('fetch', {}).get(
            'user_agent',
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
        ),
    )

    # === Subtitles (yt-dlp) ===
    ytdlp_binary: str = Field(
        default=_yaml.get('subtitles', {}).get('ytdlp_binary', "yt-dlp"),
        description="Executable used for title lookup and subtitle download"
    )
    subtitle_language: str = Field(
        default=_yaml.get('subtitles', {}).get('language', "ko"),
        description="Preferred subtitle track language"
    )
    subprocess_timeout: int = Field(
        default=_yaml.get('subtitles', {}).get('timeout', 120),
        gt=0,
        description="Timeout (seconds) for each yt-dlp invocation"
    )

    # === Logging ===
    log_dir: Path = Field(default=Path("logs"))
    log_level: str = Field(default="INFO")


settings = Settings()
