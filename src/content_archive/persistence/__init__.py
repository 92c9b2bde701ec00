from .codec import encode, decode
from .retention_store import RetentionStore

__all__ = [
    "encode", "decode",
    "RetentionStore"
]
