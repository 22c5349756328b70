"""
Persisted Starbase State.

A YAML file mapping starbase_id to the fuelling state reported on the
previous run:

    state:
      1000000001: good
      1000000002: danger

The file is read once at the start of a run and replaced atomically once at
the end. There is no locking; only one run may use a state file at a time.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

import yaml

from ..core.logging import get_logger

logger = get_logger(__name__)

STATE_KEY = "state"


class StoreError(Exception):
    """Exception raised when the state file cannot be read or written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        result: dict[str, Any] = {"error": "store_error", "message": self.message}
        if self.path is not None:
            result["path"] = str(self.path)
        return result


class YamlStateStore:
    """
    starbase_id -> state label store backed by a YAML file.

    Usage:
        store = YamlStateStore(Path("posbot-state.yaml"))
        with store.transaction() as state:
            previous = state.get(starbase_id, "unknown")
            state[starbase_id] = "good"
        # committed here, only if the block did not raise
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[int, str]:
        """
        Read the persisted mapping.

        A missing or empty file is an empty mapping.

        Raises:
            StoreError: If the file cannot be read or does not hold a state mapping
        """
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.info("State file %s not found, starting with no history", self.path)
            return {}
        except OSError as e:
            raise StoreError(f"Cannot read state file: {e}", path=self.path) from e
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid YAML in state file: {e}", path=self.path) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreError("State file must be a YAML mapping", path=self.path)

        raw = data.get(STATE_KEY) or {}
        if not isinstance(raw, dict):
            raise StoreError(f"'{STATE_KEY}' in state file must be a mapping", path=self.path)

        try:
            state = {int(k): str(v) for k, v in raw.items()}
        except (TypeError, ValueError) as e:
            raise StoreError(f"Invalid starbase id in state file: {e}", path=self.path) from e

        logger.debug("Loaded %d persisted states from %s", len(state), self.path)
        return state

    def save(self, state: Mapping[int, str]) -> None:
        """
        Replace the persisted mapping.

        Writes to a temporary file in the same directory and renames it over
        the state file, so a failed write leaves the previous file intact.

        Raises:
            StoreError: If the file cannot be written
        """
        document = {STATE_KEY: {int(k): str(v) for k, v in state.items()}}
        directory = self.path.parent

        tmp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                yaml.safe_dump(document, tmp, default_flow_style=False, sort_keys=True)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, yaml.YAMLError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Cannot write state file: {e}", path=self.path) from e

        logger.debug("Saved %d states to %s", len(document[STATE_KEY]), self.path)

    @contextmanager
    def transaction(self) -> Iterator[dict[int, str]]:
        """
        Load the mapping, yield it for modification, and save it on clean exit.

        If the block raises, nothing is written and the exception propagates.
        """
        state = self.load()
        yield state
        self.save(state)
