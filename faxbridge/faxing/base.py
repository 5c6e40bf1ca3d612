import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from fastapi.responses import JSONResponse

from faxbridge.http import RequestBody, json_response

from .config import FaxConfig
from .context import ProviderContext
from .types import DecodedBody, ProviderSendResult, SendFaxParams


def dig(value: Any, *path: str) -> Any:
    """Walks nested dicts, returning None as soon as a step is missing or not a dict."""
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def first_present(*values: Any) -> Any:
    for value in values:
        if value not in (None, ''):
            return value
    return None


def fax_id_or_default(fax_id: Any, ctx: ProviderContext) -> str:
    """The request id names the records when the webhook carried no fax id."""
    return ctx.request_id if fax_id is None else str(fax_id)


def is_success(status: int) -> bool:
    return 200 <= status < 300


@dataclass
class FetchedMedia:
    content: bytes
    content_type: Optional[str]


class FaxService(ABC):
    """
        Base class for fax providers.

        A provider is a stateless singleton: all request state arrives through
        the ``ProviderContext``, so one instance serves concurrent requests.
        Subclasses implement ``send_fax``, ``auth_header`` and
        ``process_webhook``; the base class owns the storage helpers, media
        downloads and translating webhook faults into a 500 response.
    """
    name: str
    webhook_path: str
    storage_prefix: Optional[str] = None

    @abstractmethod
    def send_fax(self, params: SendFaxParams, ctx: ProviderContext) -> ProviderSendResult:
        """
        Sends a fax of the document at ``params.media_url`` to ``params.to``.

        Returns a failed result with status 500 and no outbound call when any
        required setting is missing from ``ctx.env``.
        """
        raise NotImplementedError

    @abstractmethod
    def auth_header(self, env: FaxConfig) -> Optional[str]:
        """
        Returns the vendor ``authorization`` header value, or None when the
        credentials are not configured.
        """
        raise NotImplementedError

    @abstractmethod
    def process_webhook(self, body: RequestBody, ctx: ProviderContext) -> Dict[str, Any]:
        """
        Stores whatever the webhook carries and returns extra response fields.
        """
        raise NotImplementedError

    @property
    def key_prefix(self) -> str:
        return self.storage_prefix or self.name

    def handle_webhook(self, body: RequestBody, ctx: ProviderContext) -> JSONResponse:
        try:
            extra = self.process_webhook(body, ctx)
        except Exception as ex:  # pylint: disable=W0718
            ctx.logger.exception(f'{self.name} webhook failed', meta={'message': str(ex)})
            return json_response({'ok': False, 'requestId': ctx.request_id, 'error': str(ex)}, 500)

        return json_response({'ok': True, 'requestId': ctx.request_id, **extra})

    def fax_key(self, fax_id: str, suffix: Optional[str] = None) -> str:
        key = f'{self.key_prefix}:fax:{fax_id}'
        return f'{key}:{suffix}' if suffix else key

    def media_key(self, fax_id: str) -> str:
        return f'{self.fax_key(fax_id)}.pdf'

    def webhook_url(self, ctx: ProviderContext) -> str:
        return f'{ctx.base_url}{self.webhook_path}'

    def _post_json(self, url: str, payload: Dict[str, Any], ctx: ProviderContext) -> ProviderSendResult:
        headers = {
            'authorization': self.auth_header(ctx.env),
            'content-type': 'application/json',
        }
        try:
            response = requests.post(url, json=payload, headers=headers)
        except requests.RequestException as ex:
            ctx.logger.error(f'{self.name} fax request failed', meta={'url': url, 'message': str(ex)})
            return ProviderSendResult(ok=False, status=502, fax=None, raw={'error': str(ex)})

        body = DecodedBody.decode(response.text)
        ctx.logger.info(f'{self.name} fax response', meta={'status': response.status_code, 'body': body.value})
        return ProviderSendResult(
            ok=is_success(response.status_code),
            status=response.status_code,
            fax=body.value,
            raw=body.value
        )

    def fetch_media(self, url: Any, ctx: ProviderContext) -> Optional[FetchedMedia]:
        """
        Downloads media a webhook references, authenticated the same way as
        outbound calls. Returns None, after logging, when the URL is not a
        usable string or the download fails.
        """
        if not isinstance(url, str) or not url.strip():
            ctx.logger.warning('skipping fax media with unusable url', meta={'mediaUrl': repr(url)[:120]})
            return None

        headers = {}
        authorization = self.auth_header(ctx.env)
        if authorization:
            headers['authorization'] = authorization

        ctx.logger.info('downloading fax media', meta={'mediaUrl': url[:120]})
        try:
            response = requests.get(url, headers=headers)
        except requests.RequestException as ex:
            ctx.logger.warning('failed to fetch fax media', meta={'mediaUrl': url[:120], 'message': str(ex)})
            return None

        if not is_success(response.status_code):
            ctx.logger.warning('failed to fetch fax media', meta={'status': response.status_code, 'mediaUrl': url[:120]})
            return None

        return FetchedMedia(content=response.content, content_type=response.headers.get('content-type'))

    def store_media(self, fax_id: str, media: FetchedMedia, ctx: ProviderContext) -> str:
        key = self.media_key(fax_id)
        ctx.blob_store.put(key, media.content, {'contentType': media.content_type or 'application/pdf'})
        ctx.logger.info('stored fax media', meta={'key': key, 'bytes': len(media.content)})
        return key

    def store_json(self, key: str, payload: Any, ctx: ProviderContext) -> None:
        ctx.blob_store.put(key, json.dumps(payload, default=str), {'contentType': 'application/json'})

    def store_files(self, body: RequestBody, fax_id: str, ctx: ProviderContext) -> int:
        for uploaded in body.files:
            ctx.blob_store.put(
                self.fax_key(fax_id, uploaded.filename or uploaded.field),
                uploaded.content,
                {'filename': uploaded.filename, 'contentType': uploaded.content_type}
            )
        return len(body.files)

    def store_body(self, body: RequestBody, fax_id: str, ctx: ProviderContext) -> int:
        """
        Stores a body the generic way: file parts under their own keys and
        fields at ``payload.json``, or the raw text at ``raw.txt`` when the
        body is neither a form nor JSON. Returns the number of files stored.
        """
        if body.kind == RequestBody.TEXT:
            ctx.blob_store.put(self.fax_key(fax_id, 'raw.txt'), body.raw_text, {'contentType': 'text/plain'})
            ctx.logger.info(f'stored {self.name} webhook raw text', meta={'faxId': fax_id, 'length': len(body.raw_text)})
            return 0

        files_stored = self.store_files(body, fax_id, ctx)
        self.store_json(self.fax_key(fax_id, 'payload.json'), body.payload, ctx)
        ctx.logger.info(f'stored {self.name} webhook {body.kind}', meta={
            'faxId': fax_id,
            'fileCount': files_stored,
            'fields': sorted(body.fields),
        })
        return files_stored
