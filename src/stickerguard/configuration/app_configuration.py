from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict
import yaml

from stickerguard.configuration.filter_settings import FilterSettings
from stickerguard.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()
FILTER_SECTION = "sticker_filter"


def read_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Read ``path`` under a shared ``fcntl`` lock and return its top-level mapping.

    Any problem (missing file, unreadable file, invalid YAML, a top level that
    is not a mapping) is logged and yields an empty dict.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
            try:
                document = yaml.safe_load(handle)
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except FileNotFoundError:
        logger.error("[CONFIG] %s does not exist; running with defaults.", path)
        return {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("[CONFIG] Could not read %s: %s", path, exc)
        return {}

    if document is None:
        return {}
    if not isinstance(document, dict):
        logger.error("[CONFIG] %s must hold a mapping at the top level, found %s.", path, type(document).__name__)
        return {}
    return document


class AppConfig:
    """Cached view of ``app_config.yml``.

    The raw document is loaded at construction and on :meth:`reload`; the
    ``sticker_filter`` section is exposed as validated :class:`FilterSettings`.
    """

    def __init__(self, config_path: Path = CONFIG_PATH) -> None:
        self.config_path = Path(config_path)
        self._data: Dict[str, Any] = {}
        self.reload()

    def reload(self) -> Dict[str, Any]:
        """Re-read the file and return the new raw mapping (empty on error)."""
        self._data = read_yaml_mapping(self.config_path)
        logger.debug("[CONFIG] Loaded %d top-level key(s) from %s", len(self._data), self.config_path)
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """The cached raw mapping. Treat it as read-only."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    @property
    def filter_settings(self) -> FilterSettings:
        """The ``sticker_filter`` section, coerced by :meth:`FilterSettings.from_mapping`."""
        section = self._data.get(FILTER_SECTION) or {}
        if not isinstance(section, dict):
            logger.warning("[CONFIG] '%s' is not a mapping; using defaults.", FILTER_SECTION)
            section = {}
        return FilterSettings.from_mapping(section)
