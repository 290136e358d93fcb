"""Persist the task registry and exchange task sets through files."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from business_logic.task_registry import MergePolicy, MergeResult, TaskRegistry
from config import config
from errors import StorageError
from task_codec import deserialize_all, serialize_all

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String values stored under string keys in a single JSON file.

    Reads are served from memory; set_string() only takes effect on disk
    after flush().
    """

    def __init__(self, path: Path):
        """
        Initialize KeyValueStore.

        Args:
            path: JSON file backing the store. A missing file is an empty store.

        Raises:
            StorageError: If the file exists but cannot be read or parsed
        """
        self.path = Path(path)
        self._values: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        except ValueError as e:
            raise StorageError(f"Storage file {self.path} is corrupted: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise StorageError(f"Storage file {self.path} is not a key/value map")
        return data

    def get_string(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None."""
        return self._values.get(key)

    def set_string(self, key: str, value: str):
        """Store a value under key (in memory until flush)."""
        self._values[key] = value

    def flush(self):
        """
        Write all values to disk.

        The file is replaced atomically so an interrupted write never leaves
        a truncated store behind.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self._values, f, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        except ValueError as e:
            raise StorageError(f"Cannot encode data for {self.path}: {e}") from e


class TaskStorage:
    """Load, save, import and export task sets."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None,
                 store: Optional[KeyValueStore] = None):
        """
        Initialize TaskStorage.

        Args:
            base_dir: Directory holding the storage file. If None, uses
                config.data_dir.
            store: Key/value store to use instead of the default file in
                base_dir

        Raises:
            StorageError: If the directory or the storage file is unusable
        """
        if base_dir is None:
            self.base_dir = config.data_dir
        else:
            self.base_dir = Path(base_dir).expanduser()
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.base_dir}: {e}") from e

        self.store = store if store is not None else KeyValueStore(self.base_dir / config.storage_file)
        self.key = config.task_list_key

    def load_tasks(self) -> TaskRegistry:
        """Load the stored task set.

        Returns:
            A new TaskRegistry; empty if nothing was stored yet

        Raises:
            MalformedInput: If the stored task list cannot be decoded
        """
        registry = TaskRegistry()
        text = self.store.get_string(self.key)
        if text is None:
            logger.info("No stored task list found, starting empty")
            return registry

        registry.merge(deserialize_all(text), MergePolicy.OVERWRITE)
        registry.verify_integrity()
        logger.info("Loaded %d task(s)", len(registry))
        return registry

    def save_tasks(self, registry: TaskRegistry):
        """Store the whole task set.

        Raises:
            StorageError: If the store cannot be written
        """
        self.store.set_string(self.key, serialize_all(registry.list()))
        self.store.flush()
        logger.debug("Saved %d task(s)", len(registry))

    def export_tasks(self, registry: TaskRegistry, path: Union[str, Path]) -> int:
        """Write the whole task set to a file.

        Returns:
            Number of tasks exported

        Raises:
            StorageError: If the file cannot be written
        """
        path = Path(path).expanduser()
        tasks = registry.list()
        try:
            path.write_text(serialize_all(tasks, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to export tasks to {path}: {e}") from e
        except ValueError as e:
            raise StorageError(f"Cannot encode tasks for {path}: {e}") from e
        logger.info("Exported %d task(s) to %s", len(tasks), path)
        return len(tasks)

    def import_tasks(self, registry: TaskRegistry, path: Union[str, Path],
                     policy: MergePolicy) -> MergeResult:
        """Merge the task set of a file into the registry.

        The file is decoded completely before anything is merged, so a
        malformed file leaves the registry untouched.

        Returns:
            MergeResult of the merge

        Raises:
            StorageError: If the file cannot be read
            MalformedInput: If the file content cannot be decoded
        """
        path = Path(path).expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to import tasks from {path}: {e}") from e

        tasks = deserialize_all(data)
        result = registry.merge(tasks, policy)
        registry.verify_integrity()
        logger.info(
            "Imported %s (%s): %d added, %d replaced, %d skipped",
            path, policy.value, result.added, result.replaced, result.skipped,
        )
        return result
