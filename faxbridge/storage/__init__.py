from .base import BlobStore, StoredBlob
from .memory import MemoryBlobStore


__all__ = [
    'BlobStore',
    'StoredBlob',
    'MemoryBlobStore'
]
