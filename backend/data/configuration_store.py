"""Per-tenant KB API credentials, persisted in SQLite"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import config

logger = logging.getLogger(__name__)


class ConfigurationStore:
    """SQLite backed store of one KB API configuration per tenant"""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.CONFIG_DB_PATH
        self._ensure_database_exists()

    def _ensure_database_exists(self):
        """Create the database file and table if needed"""
        directory = os.path.dirname(self.db_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory, exist_ok=True)

        with self.get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kb_configurations (
                    tenant TEXT PRIMARY KEY,
                    customer_id TEXT NOT NULL,
                    api_key TEXT NOT NULL,
                    base_url TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def get_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def get(self, tenant: str) -> Optional[Dict[str, Any]]:
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT tenant, customer_id, api_key, base_url, updated_at FROM kb_configurations WHERE tenant = ?",
                (tenant,)
            ).fetchone()
        return dict(row) if row else None

    def put(self, tenant: str, customer_id: str, api_key: str, base_url: str) -> Dict[str, Any]:
        updated_at = datetime.now(timezone.utc).isoformat()
        with self.get_connection() as conn:
            conn.execute("""
                INSERT INTO kb_configurations (tenant, customer_id, api_key, base_url, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(tenant) DO UPDATE SET
                    customer_id = excluded.customer_id,
                    api_key = excluded.api_key,
                    base_url = excluded.base_url,
                    updated_at = excluded.updated_at
            """, (tenant, customer_id, api_key, base_url, updated_at))
            conn.commit()

        logger.info(f"Stored KB configuration for tenant {tenant} (customer {customer_id}, {base_url})")
        return {
            "tenant": tenant,
            "customer_id": customer_id,
            "api_key": api_key,
            "base_url": base_url,
            "updated_at": updated_at,
        }


_store: Optional[ConfigurationStore] = None


def get_configuration_store() -> ConfigurationStore:
    """Process wide store instance, created on first use"""
    global _store
    if _store is None:
        _store = ConfigurationStore()
    return _store
