# ditachunk/config.py

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .chunk.filename import filename_generator_names
from .chunk.naming import get_naming_scheme

TRUE_VALUES = ("true", "1", "yes")


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).lower() in TRUE_VALUES


@dataclass
class ChunkConfig:
    """Configuration for the chunk map pass."""
    root_chunk_override: Optional[str] = None
    support_to_navigation: bool = False
    temp_file_name_scheme: str = "default"
    filename_generator: str = "counter"
    log_file: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.log_file, str):
            self.log_file = Path(self.log_file)
        self.support_to_navigation = _as_bool(self.support_to_navigation)

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: unknown filename generator
            NamingSchemeError: unknown temp file name scheme
        """
        if self.filename_generator not in filename_generator_names():
            raise ValueError(f"Unknown chunk filename generator: {self.filename_generator}")
        get_naming_scheme(self.temp_file_name_scheme)

    def merged(self, values: Dict[str, Any]) -> "ChunkConfig":
        """New config with ``values`` applied over this one."""
        known = {f.name for f in fields(self)}
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update({k: v for k, v in values.items() if k in known and v is not None})
        return ChunkConfig(**current)

    @classmethod
    def from_yaml(cls, path: Path, base: Optional["ChunkConfig"] = None) -> "ChunkConfig":
        """Load settings from the ``chunk`` section of a YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        section = data.get("chunk", {}) or {}
        values = {key.replace("-", "_"): value for key, value in section.items()}
        return (base or cls()).merged(values)

    @classmethod
    def from_environment(cls, base: Optional["ChunkConfig"] = None,
                         dotenv_path: Optional[Path] = None) -> "ChunkConfig":
        """Apply DITA_* environment variables over ``base``."""
        load_dotenv(dotenv_path)
        navigation = os.getenv("DITA_CHUNK_TO_NAVIGATION")
        values = {
            "root_chunk_override": os.getenv("DITA_CHUNK_ROOT_OVERRIDE"),
            "support_to_navigation": _as_bool(navigation) if navigation is not None else None,
            "temp_file_name_scheme": os.getenv("DITA_TEMP_FILE_NAME_SCHEME"),
            "filename_generator": os.getenv("DITA_CHUNK_FILENAME_GENERATOR"),
            "log_file": os.getenv("DITA_CHUNK_LOG_FILE"),
        }
        return (base or cls()).merged(values)


def load_config(config_file: Optional[Path] = None) -> ChunkConfig:
    """
    Load and validate the configuration.

    Precedence, lowest first: defaults, YAML file, environment.
    """
    config = ChunkConfig()
    if config_file is not None:
        config = ChunkConfig.from_yaml(config_file, config)
    config = ChunkConfig.from_environment(config)
    config.validate()
    return config
