from typing import Any, Dict, List, Optional, Union

from .base import BlobStore, StoredBlob, to_bytes


class MemoryBlobStore(BlobStore):
    """Process-local blob store, for tests and single-process runs."""

    def __init__(self):
        self._blobs: Dict[str, StoredBlob] = {}

    def put(self, key: str, value: Union[bytes, str], metadata: Optional[Dict[str, Any]] = None) -> None:
        self._blobs[key] = StoredBlob(value=to_bytes(value), metadata=dict(metadata or {}))

    def get(self, key: str) -> Optional[StoredBlob]:
        return self._blobs.get(key)

    def keys(self) -> List[str]:
        return list(self._blobs)

    def __len__(self):
        return len(self._blobs)

    def __contains__(self, key):
        return key in self._blobs
