"""
Client-side key-value storage for the current trip recommendation.

The store mirrors browser local storage: string keys, string values, and the
whole recommendation serialised as JSON under a single fixed key.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from pydantic import ValidationError

from src.models.response_models import TripRecommendation

RECOMMENDATION_KEY = "tripRecommendations"


class RecommendationNotFoundError(LookupError):
    pass


class RecommendationParseError(ValueError):
    pass


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Key-value storage persisted as a single JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.logger = logging.getLogger(__name__)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.logger.error(f"Storage file {self.path} is unreadable: {e}")
            raise RecommendationParseError("Failed to load trip recommendations") from e
        if not isinstance(data, dict):
            self.logger.error(f"Storage file {self.path} does not hold a JSON object")
            raise RecommendationParseError("Failed to load trip recommendations")
        return data

    def _write_all(self, items: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


class RecommendationStore:
    def __init__(self, storage: KeyValueStorage, key: str = RECOMMENDATION_KEY):
        self.storage = storage
        self.key = key
        self.logger = logging.getLogger(__name__)

    def save(self, recommendation: TripRecommendation) -> None:
        self.storage.set_item(self.key, json.dumps(recommendation.to_json_dict(), ensure_ascii=False))
        self.logger.debug(f"Stored recommendation for {recommendation.city}")

    def load(self) -> TripRecommendation:
        raw = self.storage.get_item(self.key)
        if raw is None:
            raise RecommendationNotFoundError("No trip recommendations found")
        try:
            return TripRecommendation.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as e:
            raise RecommendationParseError("Failed to load trip recommendations") from e

    def clear(self) -> None:
        self.storage.remove_item(self.key)
