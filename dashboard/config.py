"""
Dashboard Configuration Management
"""

import os
import json
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Dict, Any

from dotenv import load_dotenv


@dataclass
class DashboardConfig:
    """Configuration for the NACOS admin dashboard client"""

    # Server settings
    server_url: str = "http://localhost:8000"
    api_prefix: str = "/api"
    request_timeout: int = 30  # seconds

    # Section cache (milliseconds)
    default_ttl_ms: int = 300_000
    volatile_ttl_ms: int = 60_000
    volatile_sections: Tuple[str, ...] = ("dashboard", "analytics")

    # Navigation
    fallback_section: str = "dashboard"
    loading_timeout_ms: int = 30_000
    narrow_viewport_px: int = 1024
    login_page: str = "index.html"

    # Notifications
    toast_duration_ms: int = 5_000

    # Output settings
    verbose: bool = False

    # Paths
    config_dir: str = field(default_factory=lambda: str(Path.home() / ".nacos"))
    credentials_file: str = "credentials.json"
    history_file: str = "history"

    def __post_init__(self):
        """Resolve file paths relative to the config directory"""
        self.volatile_sections = tuple(self.volatile_sections)
        self._resolve_paths()

    def _resolve_paths(self) -> None:
        if not os.path.isabs(self.credentials_file):
            self.credentials_file = str(Path(self.config_dir) / self.credentials_file)
        if not os.path.isabs(self.history_file):
            self.history_file = str(Path(self.config_dir) / self.history_file)

    @property
    def api_base_url(self) -> str:
        return self.server_url.rstrip("/") + self.api_prefix

    def ensure_config_dir(self) -> Path:
        path = Path(self.config_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file"""
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
            for key, value in data.items():
                if hasattr(self, key):
                    setattr(self, key, tuple(value) if key == "volatile_sections" else value)

    def save_to_file(self, config_path: Optional[str] = None) -> None:
        """Save configuration to JSON file"""
        self.ensure_config_dir()
        path = Path(config_path or (Path(self.config_dir) / "config.json"))
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_default(cls) -> "DashboardConfig":
        """Load .env, the user config file, then environment overrides"""
        load_dotenv()

        config = cls()
        config._load_from_env()

        default_config_path = Path(config.config_dir) / "config.json"
        if default_config_path.exists():
            config.load_from_file(str(default_config_path))
            # Environment wins over the file
            config._load_from_env()

        return config

    def _load_from_env(self) -> None:
        """Load configuration from environment variables"""
        env_mappings = {
            "NACOS_SERVER_URL": "server_url",
            "NACOS_API_PREFIX": "api_prefix",
            "NACOS_TIMEOUT": ("request_timeout", int),
            "NACOS_DEFAULT_TTL_MS": ("default_ttl_ms", int),
            "NACOS_VOLATILE_TTL_MS": ("volatile_ttl_ms", int),
            "NACOS_LOADING_TIMEOUT_MS": ("loading_timeout_ms", int),
            "NACOS_VERBOSE": ("verbose", lambda x: x.lower() == "true"),
            "NACOS_CONFIG_DIR": "config_dir",
        }

        for env_var, mapping in env_mappings.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(mapping, tuple):
                    attr, converter = mapping
                    setattr(self, attr, converter(value))
                else:
                    setattr(self, mapping, value)

        if os.environ.get("NACOS_CONFIG_DIR"):
            self.credentials_file = str(Path(self.config_dir) / Path(self.credentials_file).name)
            self.history_file = str(Path(self.config_dir) / Path(self.history_file).name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary"""
        data = asdict(self)
        data["volatile_sections"] = list(self.volatile_sections)
        return data
