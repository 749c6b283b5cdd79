"""Key-value store adapter."""

from youkhana.adapters.kv import keys
from youkhana.adapters.kv.store import KeyValueStore, drop_empty

__all__ = ["KeyValueStore", "drop_empty", "keys"]
