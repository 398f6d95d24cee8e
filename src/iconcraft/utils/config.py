import sys
import os
import re
import shutil
import logging
from pathlib import Path
from typing import Optional, Any, Dict

import yaml

logger = logging.getLogger(__name__)


class IconCraftConfig:
    """
    Centralized configuration management for IconCraft.
    Handles precedence of settings:
    1. Environment (ICONCRAFT_<NAME>) - per-invocation override
    2. Project file (iconcraft.yaml in the working directory, or ICONCRAFT_CONFIG)
    3. Caller default
    CLI options are applied on top by the command layer.
    """

    ENV_PREFIX = "ICONCRAFT_"
    CONFIG_FILE = "iconcraft.yaml"

    _file_cache: Optional[Dict[str, Any]] = None
    _file_cache_path: Optional[Path] = None

    @classmethod
    def env_name(cls, value_name: str) -> str:
        """'SourceDir' -> 'ICONCRAFT_SOURCE_DIR'"""
        snake = re.sub(r'(?<!^)(?=[A-Z])', '_', value_name).upper()
        return cls.ENV_PREFIX + snake

    @classmethod
    def config_path(cls) -> Path:
        override = os.environ.get(cls.ENV_PREFIX + "CONFIG")
        if override:
            return Path(override)
        return Path.cwd() / cls.CONFIG_FILE

    @classmethod
    def _load_file(cls) -> Dict[str, Any]:
        path = cls.config_path()
        if cls._file_cache is not None and cls._file_cache_path == path:
            return cls._file_cache

        data: Dict[str, Any] = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                try:
                    loaded = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"{path} is not valid YAML: {e}")
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise ValueError(f"{path} must contain a mapping, got {type(loaded).__name__}")
            data = loaded
            logger.debug(f"Loaded configuration from {path}")

        cls._file_cache = data
        cls._file_cache_path = path
        return data

    @classmethod
    def reset(cls):
        """Drops the cached configuration file contents."""
        cls._file_cache = None
        cls._file_cache_path = None

    @classmethod
    def get_value(cls, value_name: str, default: Any = None) -> Any:
        """
        Retrieves a setting respecting the precedence order.
        Returns 'default' if the value is not found in any location.
        """
        # Precedence 1: Environment
        val = os.environ.get(cls.env_name(value_name))
        if val is not None:
            logger.debug(f"Config '{value_name}' found in environment: {val}")
            return val

        # Precedence 2: Project file
        data = cls._load_file()
        if value_name in data and data[value_name] is not None:
            logger.debug(f"Config '{value_name}' found in {cls._file_cache_path}: {data[value_name]}")
            return data[value_name]

        return default

    @classmethod
    def get_bool(cls, value_name: str, default: bool = False) -> bool:
        val = cls.get_value(value_name)
        if val is None:
            return default
        if isinstance(val, bool):
            return val
        if isinstance(val, int):
            return val == 1
        return str(val).strip().lower() in ("1", "true", "yes", "on")

    @classmethod
    def get_int(cls, value_name: str, default: int) -> int:
        val = cls.get_value(value_name)
        if val is None:
            return default
        try:
            return int(val)
        except (TypeError, ValueError):
            raise ValueError(f"Config '{value_name}' must be an integer, got {val!r}")

    @classmethod
    def get_path(cls, value_name: str, default: str) -> Path:
        return Path(cls.get_value(value_name, default))

    @classmethod
    def is_debug_mode(cls) -> bool:
        """Checks if debug mode is enabled via Command Line, Environment, or config file."""
        # 1. CLI Arguments
        if '--debug' in sys.argv or '-d' in sys.argv:
            return True

        # 2. Environment Variable
        if os.environ.get('ICONCRAFT_DEBUG', '').lower() in ('1', 'true', 'yes'):
            return True

        # 3. Config (ICONCRAFT_DEBUG_MODE or iconcraft.yaml)
        if cls.get_bool("DebugMode"):
            return True

        # 4. Default for dev builds
        from iconcraft import __version__
        return "dev" in __version__.lower()

    @classmethod
    def get_jobs(cls) -> int:
        """Maximum number of concurrently running tool processes."""
        jobs = cls.get_int("Jobs", os.cpu_count() or 1)
        return max(1, jobs)

    @classmethod
    def get_tool(cls, tool: str) -> str:
        """
        Returns the command for an external tool: 'Inkscape', 'ImageMagick' or 'Iconutil'.
        An explicit setting wins. ImageMagick 7 ships 'magick', v6 only 'convert'.
        """
        configured = cls.get_value(tool)
        if configured:
            return str(configured)

        if tool == "ImageMagick":
            if shutil.which("magick"):
                return "magick"
            return "convert"
        if tool == "Inkscape":
            return "inkscape"
        if tool == "Iconutil":
            return "iconutil"
        raise KeyError(f"Unknown tool: {tool}")
