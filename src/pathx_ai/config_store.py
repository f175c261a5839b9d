#!filepath: src/pathx_ai/config_store.py
from __future__ import annotations

import copy
import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from pathx_ai.llm.provider_config import ProviderConfig
from pathx_ai.utils.logger import get_logger

logger = get_logger(__name__)

SETTINGS_COLLECTION = "admin_settings"
API_CONFIG_DOC = "api_config"


class SettingsStore(Protocol):
    """Minimal document store, one json object per (collection, doc id)."""

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]: ...

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None: ...


@dataclass(slots=True)
class InMemorySettingsStore:
    """Process local store, for tests and embedding."""

    documents: Dict[Tuple[str, str], Dict[str, Any]] = field(default_factory=dict)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self.documents.get((collection, doc_id))
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.documents[(collection, doc_id)] = copy.deepcopy(dict(data))


@dataclass(frozen=True, slots=True)
class SqliteSettingsStore:
    """SQLite backed store with json payloads.

    Attributes:
        path: Database file.
        timeout_seconds: Busy timeout in seconds.
    """

    path: Path
    timeout_seconds: int = 30

    def connect(self) -> sqlite3.Connection:
        p = Path(self.path).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(p), timeout=self.timeout_seconds)
        conn.row_factory = sqlite3.Row
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                doc_id TEXT NOT NULL,
                payload TEXT NOT NULL,
                PRIMARY KEY (collection, doc_id)
            )
            """
        )
        return conn

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        conn = self.connect()
        try:
            row = conn.execute(
                "SELECT payload FROM documents WHERE collection = ? AND doc_id = ?",
                (collection, doc_id),
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        data = json.loads(row["payload"])
        if not isinstance(data, dict):
            raise ValueError(f"Document {collection}/{doc_id} is not a json object")
        return data

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        payload = json.dumps(dict(data), ensure_ascii=False)
        conn = self.connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO documents (collection, doc_id, payload)
                    VALUES (?, ?, ?)
                    ON CONFLICT (collection, doc_id) DO UPDATE SET payload = excluded.payload
                    """,
                    (collection, doc_id, payload),
                )
        finally:
            conn.close()


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProviderConfigCache:
    """Loads the provider configuration once and keeps it until invalidated.

    The cached value is replaced wholesale, never mutated, so concurrent
    readers always see a complete snapshot.
    """

    def __init__(
        self,
        store: SettingsStore,
        defaults: Callable[[], ProviderConfig],
        *,
        collection: str = SETTINGS_COLLECTION,
        doc_id: str = API_CONFIG_DOC,
    ) -> None:
        self._store = store
        self._defaults = defaults
        self._collection = collection
        self._doc_id = doc_id
        self._cached: Optional[ProviderConfig] = None

    @property
    def is_cached(self) -> bool:
        return self._cached is not None

    def load(self) -> ProviderConfig:
        """Return the active configuration.

        A missing document yields the defaults. A failing fetch propagates.
        """
        cached = self._cached
        if cached is not None:
            return cached

        logger.debug(f"Config cache miss, fetching {self._collection}/{self._doc_id}")
        data = self._store.get(self._collection, self._doc_id)
        base = self._defaults()
        if data is None:
            logger.info("No stored API config, using defaults")
            cfg = base
        else:
            cfg = ProviderConfig.from_document(data, base=base)
        self._cached = cfg
        return cfg

    def invalidate(self) -> None:
        self._cached = None
        logger.debug("Config cache invalidated")

    def update(self, config: ProviderConfig) -> None:
        """Persist a new configuration, then drop the cached one.

        A failed write propagates and leaves the cache untouched.
        """
        doc = config.to_document()
        doc["updatedAt"] = _utc_now_iso()
        try:
            self._store.set(self._collection, self._doc_id, doc)
        except Exception as e:
            logger.error(f"❌ Failed to update API config: {e}")
            raise
        self.invalidate()
        logger.info("✅ API configuration updated")
