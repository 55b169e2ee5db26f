"""
SLA Insights External Integrations
===================================

External concerns for the SLA insights engine:
- YAML threshold file loading
- Watchdog-driven hot reload of the threshold file
"""

import threading
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from core.exceptions import ConfigurationException
from shared.infrastructure.logging import get_logger
from sla_insights.application.services import ISLAConfigProvider
from sla_insights.domain.value_objects import SLAThresholds

logger = get_logger(__name__)


class ConfigFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA threshold file changes."""

    def __init__(self, config_manager: "SLAConfigManager", config_path: Path):
        self.config_manager = config_manager
        self.config_path = config_path
        super().__init__()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if Path(event.src_path).resolve() == self.config_path.resolve():
            logger.info(f"Threshold file changed: {event.src_path}")
            self.config_manager.reload()

    on_created = on_modified


class SLAConfigManager(ISLAConfigProvider):
    """
    Thread-safe SLA threshold manager with hot-reload support.

    Uses watchdog to monitor file changes and reload thresholds
    without restarting the host service. A reload that fails keeps the
    last good thresholds in place.
    """

    def __init__(self):
        self._config: Optional[SLAThresholds] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> SLAThresholds:
        """Initial threshold load."""
        self._path = Path(path)
        config = self._load_from_file(self._path)
        with self._lock:
            self._config = config
        return config

    def _load_from_file(self, path: Path) -> SLAThresholds:
        """Load and parse the YAML threshold file."""
        if not path.exists():
            logger.warning(f"SLA threshold file not found: {path}, using defaults")
            return SLAThresholds()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationException(f"invalid YAML: {e}", source=str(path)) from e

        # Accept either a flat mapping or one nested under "thresholds"
        if isinstance(data, dict):
            data = data.get("thresholds", data) or {}
        if not isinstance(data, dict):
            raise ConfigurationException("thresholds must be a mapping", source=str(path))

        try:
            return SLAThresholds.model_validate(data)
        except ValidationError as e:
            raise ConfigurationException(
                "invalid threshold values",
                source=str(path),
                details={"errors": e.errors(include_url=False)}
            ) from e

    def reload(self) -> bool:
        """Reload thresholds from file."""
        if self._path is None:
            return False

        try:
            new_config = self._load_from_file(self._path)
        except ConfigurationException as e:
            logger.error(f"Failed to reload SLA thresholds: {e}")
            return False

        with self._lock:
            self._config = new_config
        logger.info("SLA thresholds reloaded successfully")
        return True

    def start_watching(self) -> bool:
        """
        Hot-reload the threshold file when it changes on disk.

        Returns:
            True if an observer is running afterwards. A missing file or a
            platform without file events leaves the current thresholds static.
        """
        if self._path is None:
            raise ConfigurationException("Thresholds not loaded. Call load() first.")
        if self._observer is not None:
            return True

        if not self._path.exists():
            logger.info("No threshold file to watch", extra={"path": str(self._path)})
            return False

        observer = Observer()
        observer.schedule(
            ConfigFileHandler(self, self._path),
            str(self._path.parent),
            recursive=False
        )
        try:
            observer.start()
        except OSError as e:
            logger.warning(
                "Threshold file events unavailable, thresholds stay static",
                extra={"path": str(self._path), "error": str(e)}
            )
            return False

        self._observer = observer
        logger.info("Watching threshold file", extra={"path": str(self._path)})
        return True

    def stop_watching(self) -> None:
        """Stop the observer if one is running."""
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
        logger.info("Stopped watching threshold file", extra={"path": str(self._path)})

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def config(self) -> SLAThresholds:
        """Get current thresholds."""
        with self._lock:
            config = self._config
        if config is None:
            raise ConfigurationException("SLA thresholds not loaded")
        return config

    def get_config(self) -> SLAThresholds:
        return self.config
