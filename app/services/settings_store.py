from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_MODELS_BASE_URL = "https://raw.githubusercontent.com/illuminati360/alt-hanzi-data/master/models/"
DEFAULT_THUMBNAILS_BASE_URL = "https://raw.githubusercontent.com/illuminati360/alt-hanzi-data/master/thumbnails/"
DEFAULT_FETCH_TIMEOUT_S = 16.0

_TRUE_VALUES = ("1", "true", "yes", "on")


def env_flag(name: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return str(env.get(name, "")).strip().lower() in _TRUE_VALUES


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _local_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


@dataclass(frozen=True)
class HanziConfig:
    """Resolved runtime configuration."""

    owner_name: str
    user_name: str
    models_base_url: str
    thumbnails_base_url: str
    levels_dir: Path
    sound_path: Path
    sprite_path: Path
    cache_dir: Path
    fetch_timeout_s: float = DEFAULT_FETCH_TIMEOUT_S


class SettingsStore:
    """YAML-backed settings store.

    Responsibilities:
      - Load settings.yaml
      - Resolve a HanziConfig (file values, then environment overrides)

    Relative paths in the file are resolved against the project root.
    """

    ENV_KEYS = {
        "owner_name": "OWNER_NAME",
        "user_name": "HANZI_USER",
        "models_base_url": "HANZI_MODELS_BASE_URL",
        "thumbnails_base_url": "HANZI_THUMBNAILS_BASE_URL",
        "levels_dir": "HANZI_LEVELS_DIR",
        "sound_path": "HANZI_SOUND_PATH",
        "sprite_path": "HANZI_SPRITE_PATH",
        "cache_dir": "HANZI_CACHE_DIR",
    }

    def __init__(self, settings_path: str | None = None) -> None:
        if settings_path is None:
            # <project_root>/settings.yaml
            self._path = _project_root() / "settings.yaml"
        else:
            self._path = Path(settings_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        p = self._path
        if not p.exists():
            return {}
        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, UnicodeError, yaml.YAMLError) as e:
            logger.warning("Failed to read settings %s: %s", p, e)
            return {}
        return data if isinstance(data, dict) else {}

    def config(self, environ: Optional[Mapping[str, str]] = None) -> HanziConfig:
        env = os.environ if environ is None else environ
        s = self.load()
        root = _project_root()

        def _str(key: str, default: str) -> str:
            v = env.get(self.ENV_KEYS[key])
            if v:
                return str(v).strip()
            v = s.get(key)
            return str(v).strip() if isinstance(v, (str, int)) and str(v).strip() else default

        def _path(key: str, default: Path) -> Path:
            raw = _str(key, "")
            if not raw:
                return default
            p = Path(raw).expanduser()
            return p if p.is_absolute() else root / p

        def _timeout() -> float:
            v = s.get("fetch_timeout_s", DEFAULT_FETCH_TIMEOUT_S)
            try:
                t = float(v)
            except (TypeError, ValueError):
                return DEFAULT_FETCH_TIMEOUT_S
            return t if t > 0 else DEFAULT_FETCH_TIMEOUT_S

        local = _local_user()
        cfg = HanziConfig(
            owner_name=_str("owner_name", local),
            user_name=_str("user_name", local),
            models_base_url=_str("models_base_url", DEFAULT_MODELS_BASE_URL),
            thumbnails_base_url=_str("thumbnails_base_url", DEFAULT_THUMBNAILS_BASE_URL),
            levels_dir=_path("levels_dir", root / "levels"),
            sound_path=_path("sound_path", root / "data" / "pinyin.ogg"),
            sprite_path=_path("sprite_path", root / "data" / "sprite.yaml"),
            cache_dir=_path("cache_dir", get_cache_dir()),
            fetch_timeout_s=_timeout(),
        )
        logger.debug("Resolved config: %s", cfg)
        return cfg


def get_cache_dir() -> Path:
    """Per-user cache directory for downloaded models and thumbnails."""
    home = Path.home()
    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA", str(home / "AppData" / "Local")))
    else:
        base = Path(os.environ.get("XDG_CACHE_HOME", str(home / ".cache")))
    return base / "hanzi_studio" / "models"
