"""
Client-side persistent storage package for the EcoWatch sync client
"""

from pathlib import Path

from .kv_storage import KeyValueStore, MemoryKeyValueStore, JSONFileKeyValueStore
from .session_storage import SessionStore, ACTIVE_SESSION_KEY, SESSIONS_KEY


def initialize_storage(storage_dir: str, file_name: str) -> JSONFileKeyValueStore:
    """Open the durable store under the configured directory"""
    return JSONFileKeyValueStore(Path(storage_dir) / file_name)


__all__ = [
    'KeyValueStore',
    'MemoryKeyValueStore',
    'JSONFileKeyValueStore',
    'SessionStore',
    'ACTIVE_SESSION_KEY',
    'SESSIONS_KEY',
    'initialize_storage'
]
