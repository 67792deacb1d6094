"""
Configuration management.
"""

from pathlib import Path
from typing import Any, List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".pingproc.yaml"


def load_config_file() -> dict[str, Any]:
    """
    Load optional config from ~/.pingproc.yaml or ./.pingproc.yaml.
    Returns dict with any of output_dir, verbose, max_workers, ping_executable,
    ping_args and encoding. Missing keys are omitted so callers can use their
    own defaults.
    """
    result: dict[str, Any] = {}
    candidates = [
        Path.home() / CONFIG_FILE_NAME,
        Path.cwd() / CONFIG_FILE_NAME,
    ]
    raw: dict[str, Any] = {}
    for path in candidates:
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Ignoring unreadable config file {path}: {e}")
                raw = {}
            break
    if not isinstance(raw, dict) or not raw:
        return result
    if "output_dir" in raw:
        result["output_dir"] = Path(raw["output_dir"]).expanduser().resolve()
    if "verbose" in raw:
        result["verbose"] = bool(raw["verbose"])
    if "max_workers" in raw:
        try:
            result["max_workers"] = int(raw["max_workers"])
        except (TypeError, ValueError):
            pass
    if "ping_executable" in raw:
        result["ping_executable"] = str(raw["ping_executable"])
    if "ping_args" in raw and isinstance(raw["ping_args"], list):
        result["ping_args"] = [str(a) for a in raw["ping_args"]]
    if "encoding" in raw:
        result["encoding"] = str(raw["encoding"])
    return result


class AppConfig(BaseModel):
    """Application configuration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    output_dir: Path = Field(default=Path("output"))
    verbose: bool = False
    max_workers: int = Field(default=10, ge=1)
    ping_executable: str = "ping"
    ping_args: Optional[List[str]] = None  # None: platform default
    encoding: str = "utf-8"

    @field_validator('output_dir', mode='before')
    @classmethod
    def validate_output_dir(cls, v):
        """Validate and convert output_dir to Path."""
        if v is None:
            return Path("output")
        if isinstance(v, str):
            return Path(v)
        if isinstance(v, Path):
            return v
        return Path("output")

    def model_post_init(self, __context):
        """Resolve output directory to an absolute path."""
        self.output_dir = self.output_dir.resolve()

    def ensure_output_dir(self) -> Path:
        """Create the output directory if needed and return it."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir
