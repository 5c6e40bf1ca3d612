"""
    Key/value blob storage used for outbound documents and received faxes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


DEFAULT_CONTENT_TYPE = 'application/octet-stream'


@dataclass
class StoredBlob:
    value: bytes
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        return self.metadata.get('contentType') or DEFAULT_CONTENT_TYPE

    def text(self) -> str:
        return self.value.decode('utf-8', errors='replace')


def to_bytes(value: Union[bytes, bytearray, str]) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


class BlobStore(ABC):
    """
        Base class for blob stores. Writes to an existing key overwrite it.
    """

    @abstractmethod
    def put(self, key: str, value: Union[bytes, str], metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Stores ``value`` under ``key``.

        Args:
            key (str): Storage key, e.g. ``media:report.pdf``.
            value (bytes | str): Content; text is stored UTF-8 encoded.
            metadata (dict): Optional metadata such as ``contentType`` and ``filename``.
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> Optional[StoredBlob]:
        """
        Returns the stored blob, or None when ``key`` does not exist.
        """
        raise NotImplementedError
