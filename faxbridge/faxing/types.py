import json
from dataclasses import dataclass
from typing import Any


@dataclass
class SendFaxParams:
    to: str
    media_url: str


@dataclass
class ProviderSendResult:
    ok: bool
    status: int
    fax: Any = None
    raw: Any = None

    @classmethod
    def not_configured(cls, field: str) -> 'ProviderSendResult':
        return cls(ok=False, status=500, fax=None, raw={'error': f'{field} not configured'})


@dataclass
class DecodedBody:
    """Outcome of best-effort JSON decoding: ``kind`` is ``json`` or ``text``."""
    JSON = 'json'
    TEXT = 'text'

    kind: str
    value: Any

    @classmethod
    def decode(cls, text: str) -> 'DecodedBody':
        try:
            return cls(kind=cls.JSON, value=json.loads(text))
        except ValueError:
            return cls(kind=cls.TEXT, value=text)

    @property
    def is_json(self) -> bool:
        return self.kind == self.JSON
