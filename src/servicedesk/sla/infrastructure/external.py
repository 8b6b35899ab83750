"""
SLA External Service Integrations
==================================

External concerns for SLA tracking:
- YAML policy file loading
- watchdog file observer for hot reload
"""

import threading
from pathlib import Path
from typing import Optional

import yaml
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from servicedesk.core import ConfigurationException
from servicedesk.shared.infrastructure.logging import get_logger
from servicedesk.sla.application.services import ISLAPolicyProvider
from servicedesk.sla.domain import SLAPolicy

logger = get_logger(__name__)


class PolicyFileHandler(FileSystemEventHandler):
    """Watchdog event handler for SLA policy file changes."""

    def __init__(self, policy_manager: "SLAPolicyManager", policy_path: Path):
        self.policy_manager = policy_manager
        self.policy_path = policy_path
        super().__init__()

    def _is_policy_file(self, path) -> bool:
        return Path(path).resolve() == self.policy_path.resolve()

    def on_modified(self, event):
        """Handle file modification event."""
        if event.is_directory:
            return
        if self._is_policy_file(event.src_path):
            logger.info("SLA policy file changed", extra={"path": str(event.src_path)})
            self.policy_manager.reload()

    on_created = on_modified

    def on_moved(self, event):
        """Atomic saves write a temp file and rename it over the policy file."""
        if event.is_directory:
            return
        if self._is_policy_file(event.dest_path):
            logger.info("SLA policy file replaced", extra={"path": str(event.dest_path)})
            self.policy_manager.reload()


class SLAPolicyManager(ISLAPolicyProvider):
    """
    Thread-safe SLA policy holder with hot-reload support.

    A missing file means built-in defaults. A present but broken file is a
    ConfigurationException at load time; on reload it is logged and the
    previous policy stays active.
    """

    def __init__(self):
        self._policy: Optional[SLAPolicy] = None
        self._lock = threading.Lock()
        self._path: Optional[Path] = None
        self._observer = None

    def load(self, path: Path) -> SLAPolicy:
        """Initial policy load. Raises ConfigurationException on a broken file."""
        self._path = Path(path)
        policy = self._load_from_file(self._path)
        with self._lock:
            self._policy = policy
        logger.info(
            "SLA policy loaded",
            extra={"path": str(self._path), "sla_targets": dict(policy.sla_targets)}
        )
        return policy

    def _load_from_file(self, path: Path) -> SLAPolicy:
        """Load and parse YAML policy file."""
        if not path.exists():
            logger.warning("SLA policy file not found, using defaults", extra={"path": str(path)})
            return SLAPolicy()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationException(f"SLA policy file is not valid YAML: {path}") from e

        if data is None:
            raise ConfigurationException(f"SLA policy file is empty: {path}")
        if not isinstance(data, dict):
            raise ConfigurationException(f"SLA policy file must contain a mapping: {path}")

        return SLAPolicy.from_mapping(data)

    def reload(self) -> bool:
        """Reload policy from file, keeping the current one on failure."""
        if self._path is None:
            return False

        try:
            new_policy = self._load_from_file(self._path)
        except ConfigurationException as e:
            logger.error(
                "Failed to reload SLA policy, keeping previous",
                extra={"path": str(self._path), "error": e.message, "details": e.details}
            )
            return False

        with self._lock:
            self._policy = new_policy
        logger.info("SLA policy reloaded successfully")
        return True

    def start_watching(self) -> None:
        """
        Start watching the policy file for changes.

        Skips watching when the file does not exist or the platform has no
        usable file notification support.
        """
        if self._path is None:
            raise RuntimeError("Policy not loaded. Call load() first.")

        if not self._path.exists():
            logger.info(
                "SLA policy file doesn't exist, skipping file watch",
                extra={"path": str(self._path)}
            )
            return

        try:
            self._observer = Observer()
            handler = PolicyFileHandler(self, self._path)
            self._observer.schedule(handler, str(self._path.resolve().parent), recursive=False)
            self._observer.start()
            logger.info("Started watching SLA policy file", extra={"path": str(self._path)})
        except OSError as e:
            logger.warning(f"File watching not available, using static policy: {e}")
            self._observer = None

    def stop_watching(self) -> None:
        """Stop watching the policy file (safe to call even if not watching)."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    @property
    def policy(self) -> SLAPolicy:
        """Get current policy."""
        with self._lock:
            if self._policy is None:
                raise ConfigurationException("SLA policy not loaded")
            return self._policy

    def get_policy(self) -> SLAPolicy:
        return self.policy
