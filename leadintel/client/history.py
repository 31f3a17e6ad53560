"""
Client-local analysis history.

History is a capped, newest-first list of HistoryItem kept as one JSON blob
under a single well-known key of a string key-value store. Any
MutableMapping[str, str] works as the store; JsonFileStorage persists one to
a file.

Reading never raises: entries that fail validation are dropped and the blob
is rewritten without them, and an unreadable blob reads as an empty history.
Writes log and swallow storage errors so that a history problem never takes
down the caller that just received a report.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, MutableMapping, Optional, Union

from pydantic import ValidationError

from leadintel.models.schemas import HistoryItem


logger = logging.getLogger(__name__)

STORAGE_KEY = "exec_search_history"
MAX_HISTORY_ITEMS = 50


class JsonFileStorage(MutableMapping[str, str]):
    """
    String key-value store persisted as one JSON object in a file.

    Each write replaces the file atomically (temp file + os.replace).
    A missing or unreadable file behaves as an empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def __getitem__(self, key: str) -> str:
        return self._load()[key]

    def __setitem__(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def __delitem__(self, key: str) -> None:
        data = self._load()
        del data[key]
        self._dump(data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._load())

    def __len__(self) -> int:
        return len(self._load())


class HistoryStore:
    """
    Capped, de-duplicated history of analysis sessions.

    Args:
        storage: Backing string key-value store.
        key: Key under which the JSON list is kept.
        max_items: Number of sessions retained, newest first.
    """

    def __init__(
        self,
        storage: MutableMapping[str, str],
        key: str = STORAGE_KEY,
        max_items: int = MAX_HISTORY_ITEMS,
    ):
        self._storage = storage
        self._key = key
        self._max_items = max_items

    def get_all(self) -> List[HistoryItem]:
        """Return valid items newest first, self-healing the stored blob."""
        try:
            stored = self._storage.get(self._key)
        except Exception as e:
            logger.error(f"Failed to load history: {e}")
            return []
        if not stored:
            return []

        try:
            parsed = json.loads(stored)
        except ValueError as e:
            logger.error(f"History data corrupted, ignoring it: {e}")
            return []
        if not isinstance(parsed, list):
            return []

        valid: List[HistoryItem] = []
        for entry in parsed:
            item = self._parse_entry(entry)
            if item is not None:
                valid.append(item)

        if len(valid) != len(parsed):
            logger.warning(f"Dropped {len(parsed) - len(valid)} invalid history item(s)")
            self._write(valid)
        return valid

    def save(self, item: HistoryItem) -> None:
        """Update the session in place if it exists, otherwise add it on top."""
        history = self.get_all()
        for index, existing in enumerate(history):
            if existing.id == item.id:
                history[index] = item
                break
        else:
            history.insert(0, item)
        self._write(history[: self._max_items])

    def delete(self, item_id: str) -> None:
        history = self.get_all()
        self._write([h for h in history if h.id != item_id])

    @staticmethod
    def _parse_entry(entry: Any) -> Optional[HistoryItem]:
        try:
            return HistoryItem.model_validate(entry)
        except ValidationError:
            return None

    def _write(self, items: List[HistoryItem]) -> None:
        try:
            self._storage[self._key] = json.dumps([i.model_dump(mode="json") for i in items])
        except Exception as e:
            logger.error(f"Failed to save history: {e}")
