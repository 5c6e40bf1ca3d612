import json
import logging
from dataclasses import dataclass

from faxbridge.storage.base import BlobStore

from .config import FaxConfig


class RequestLogger(logging.LoggerAdapter):
    """
    Logger adapter that stamps every record with the request id.

    Structured fields go in the ``meta`` keyword and are rendered as JSON
    after the message, and also attached to the record as ``record.meta``.
    """

    def __init__(self, logger: logging.Logger, request_id: str):
        super().__init__(logger, {'request_id': request_id})

    @property
    def request_id(self) -> str:
        return self.extra['request_id']

    def process(self, msg, kwargs):
        meta = kwargs.pop('meta', None)
        extra = {**(kwargs.get('extra') or {}), **self.extra, 'meta': meta}
        kwargs['extra'] = extra
        if meta is not None:
            msg = f'{msg} {json.dumps(meta, default=str)}'
        return f'[{self.request_id}] {msg}', kwargs


@dataclass(frozen=True)
class ProviderContext:
    """Everything a provider call may use; built once per inbound request."""
    request_id: str
    base_url: str
    env: FaxConfig
    blob_store: BlobStore
    logger: RequestLogger
