"""Configuration store with optional hot reload.

Loads the routing file into an immutable ConfigSnapshot and publishes it,
together with an empty route cache, as a single RoutingState reference.
When watching is enabled a daemon thread follows the file's parent
directory and reloads whenever an event refers to the configured file.
A failed reload leaves the previous state in place.
"""

import threading
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType

import structlog
from pydantic import ValidationError
from pydantic_core import ErrorDetails
from watchfiles import Change, watch

from http_webhook.errors import ConfigLoadError
from http_webhook.webhooks.models import ConfigSnapshot
from http_webhook.webhooks.routing import RoutingState

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_MILLIS = 200
WATCH_STEP_MILLIS = 50


def _same_file(a: Path, b: Path) -> bool:
    """Check path identity, treating a missing file as no match."""
    try:
        return a.samefile(b)
    except OSError:
        return False


def _describe_error(error: ErrorDetails) -> str:
    """Render a validation error as 'loc: msg', leaving out the input value."""
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def was_file_changed(config_file: Path, changes: Iterable[tuple[Change, str]]) -> bool:
    """Check whether a batch of watch events touches the config file.

    Args:
        config_file: The watched configuration file.
        changes: Events yielded by watchfiles for the parent directory.

    Returns:
        True if any event path is the config file.
    """
    return any(_same_file(config_file, Path(path)) for _, path in changes)


class ConfigurationStore:
    """Holds the current routing configuration.

    The initial load happens in the constructor and raises ConfigLoadError
    on failure. Readers call state() or current(); both are a single
    attribute read and never see a partially built snapshot.
    """

    def __init__(
        self,
        config_file: Path | str,
        *,
        watch: bool = False,
        debounce_millis: int = DEFAULT_DEBOUNCE_MILLIS,
        force_polling: bool | None = None,
    ) -> None:
        """Load the configuration and optionally start watching it.

        Args:
            config_file: Path of the JSON routing file.
            watch: Reload the file when it changes on disk.
            debounce_millis: How long to group filesystem events into a batch.
            force_polling: Poll instead of using native notifications
                (None lets watchfiles decide).
        """
        self._config_file = Path(config_file).absolute()
        self._debounce_millis = debounce_millis
        self._force_polling = force_polling
        self._stop_event = threading.Event()
        self._watcher: threading.Thread | None = None
        self._reload_lock = threading.Lock()
        self._logger = logger.bind(
            component="config_store", config_file=str(self._config_file)
        )

        try:
            self._state = RoutingState(self._load())
        except ConfigLoadError as e:
            self._logger.error("config_initial_load_failed", **e.to_dict())
            raise
        self._log_loaded(self._state.snapshot)

        if watch:
            self._watcher = self._start_watcher()

    @property
    def config_file(self) -> Path:
        """Absolute path of the watched file."""
        return self._config_file

    @property
    def watching(self) -> bool:
        """Whether the watcher thread is running."""
        return self._watcher is not None and self._watcher.is_alive()

    def current(self) -> ConfigSnapshot:
        """Get the published configuration snapshot."""
        return self._state.snapshot

    def state(self) -> RoutingState:
        """Get the published snapshot together with its route cache."""
        return self._state

    def reload(self) -> ConfigSnapshot:
        """Load the file again and publish it if valid.

        Concurrent reloads run one at a time, so the last one to read the
        file is the last one published.

        Returns:
            The newly published snapshot.

        Raises:
            ConfigLoadError: If the file cannot be read or is invalid. The
                previously published snapshot stays current.
        """
        with self._reload_lock:
            snapshot = self._load()
            # one reference write publishes snapshot and empty cache together
            self._state = RoutingState(snapshot)
            self._log_loaded(snapshot)
        return snapshot

    def close(self) -> None:
        """Stop watching and wait for the watcher thread to finish."""
        self._stop_event.set()
        watcher = self._watcher
        if watcher is not None and watcher is not threading.current_thread():
            watcher.join()
        self._watcher = None

    def __enter__(self) -> "ConfigurationStore":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _load(self) -> ConfigSnapshot:
        try:
            raw = self._config_file.read_bytes()
        except OSError as e:
            raise ConfigLoadError(
                f"Failed to read webhook configuration: {e}",
                path=self._config_file,
            ) from e

        try:
            return ConfigSnapshot.model_validate_json(raw)
        except ValidationError as e:
            # input values may carry authorization headers; keep only locations
            errors = e.errors(include_url=False, include_context=False, include_input=False)
            summary = "; ".join(_describe_error(error) for error in errors)
            raise ConfigLoadError(
                f"Invalid webhook configuration: {summary}",
                path=self._config_file,
                details={"errors": errors},
            ) from e

    def _log_loaded(self, snapshot: ConfigSnapshot) -> None:
        self._logger.info(
            "config_loaded",
            target_count=len(snapshot.targets),
            default_target_count=len(snapshot.default_targets),
            route_count=len(snapshot.routes),
        )

    def _start_watcher(self) -> threading.Thread | None:
        try:
            watcher = threading.Thread(
                target=self._watch,
                name="webhook-config-watcher",
                daemon=True,
            )
            watcher.start()
        except RuntimeError as e:
            self._logger.warning(
                "config_watcher_setup_failed",
                error=str(e),
                message="no automatic reloads will happen",
            )
            return None
        return watcher

    def _watch(self) -> None:
        self._logger.debug(
            "config_watcher_started", directory=str(self._config_file.parent)
        )
        try:
            for changes in watch(
                self._config_file.parent,
                watch_filter=None,
                debounce=self._debounce_millis,
                step=WATCH_STEP_MILLIS,
                stop_event=self._stop_event,
                recursive=False,
                raise_interrupt=False,
                force_polling=self._force_polling,
            ):
                if not was_file_changed(self._config_file, changes):
                    continue
                try:
                    self.reload()
                except ConfigLoadError as e:
                    self._logger.warning("config_reload_failed", **e.to_dict())
        except Exception as e:
            self._logger.warning(
                "config_watcher_failed",
                error=str(e),
                message="no automatic reloads will happen",
            )
        self._logger.info("config_watcher_terminated")
