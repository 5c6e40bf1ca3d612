"""
FastAPI application for the fax gateway.

Routes:
    PUT  /media/{key}          upload a document (basic auth)
    GET  /media/{key}          serve a stored document (public, vendors fetch it)
    POST /fax/send             send a fax (basic auth)
    POST <webhook_path>        vendor webhook of the configured provider
"""
import asyncio
import logging
import uuid
from typing import Any, Callable, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response

from faxbridge.faxing.base import FaxService
from faxbridge.faxing.config import FaxConfig
from faxbridge.faxing.context import ProviderContext, RequestLogger
from faxbridge.faxing.factory import FaxServiceFactory, fax_service_factory
from faxbridge.faxing.types import SendFaxParams
from faxbridge.http import RequestBody, json_response, read_request_body
from faxbridge.storage.base import BlobStore

from .auth import check_basic_auth

logger = logging.getLogger(__name__)

MEDIA_PREFIX = '/media/'
MEDIA_ROUTE = '/media/{key:path}'
SEND_FAX_PATH = '/fax/send'
AUTH_REALM = 'faxbridge'


def error_response(ctx: ProviderContext, error: str, status: int) -> Response:
    return json_response({'ok': False, 'requestId': ctx.request_id, 'error': error}, status)


class FaxGateway:
    """
        Wires a configuration and a blob store into a FastAPI application,
        available as ``gateway.app``.

        The provider is resolved from ``FAX_PROVIDER`` on every request, before
        the route runs, so a misconfigured provider fails each request with 500.
        Only the configured provider's webhook path is served.
    """

    def __init__(self, config: FaxConfig, blob_store: BlobStore, factory: FaxServiceFactory = fax_service_factory):
        self.config = config
        self.blob_store = blob_store
        self.factory = factory
        self.app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(title='faxbridge', docs_url=None, redoc_url=None, openapi_url=None)
        protected = [Depends(self.require_basic_auth)]

        @app.put(MEDIA_ROUTE, dependencies=protected)
        async def upload_media(key: str, request: Request) -> Response:
            content = await request.body()
            return await self.dispatch(request, self.upload_media, key, content, request.headers.get('content-type'))

        @app.get(MEDIA_ROUTE)
        async def serve_media(key: str, request: Request) -> Response:
            return await self.dispatch(request, self.serve_media, key)

        @app.post(SEND_FAX_PATH, dependencies=protected)
        async def send_fax(request: Request) -> Response:
            body = await read_request_body(request)
            return await self.dispatch(request, self.send_fax, body)

        async def receive_webhook(request: Request) -> Response:
            body = await read_request_body(request)
            return await self.dispatch(request, self.receive_webhook, request.url.path, body)

        for webhook_path in sorted({service.webhook_path for service in self.factory.services()}):
            app.add_api_route(webhook_path, receive_webhook, methods=['POST'])

        return app

    def require_basic_auth(self, request: Request) -> None:
        if not check_basic_auth(request.headers.get('authorization'), self.config):
            raise HTTPException(
                status_code=401,
                detail='Unauthorized',
                headers={'WWW-Authenticate': f'Basic realm="{AUTH_REALM}"'}
            )

    async def dispatch(self, request: Request, handler: Callable[..., Response], *args: Any) -> Response:
        """
        Resolves the provider, builds the request context and runs ``handler``
        in a worker thread. Any exception the handler raises becomes a JSON 500.
        """
        request_id = str(uuid.uuid4())

        resolution = self.factory.resolve(self.config.FAX_PROVIDER)
        if not resolution.ok:
            logger.error("[%s] %s", request_id, resolution.error)
            return json_response({'ok': False, 'error': resolution.error, 'requestId': request_id}, 500)

        ctx = ProviderContext(
            request_id=request_id,
            base_url=str(request.base_url).rstrip('/'),
            env=self.config,
            blob_store=self.blob_store,
            logger=RequestLogger(logger, request_id)
        )
        try:
            return await asyncio.to_thread(handler, resolution.provider, ctx, *args)
        except Exception as ex:  # pylint: disable=W0718
            ctx.logger.exception('request failed', meta={'path': request.url.path, 'message': str(ex)})
            return error_response(ctx, str(ex), 500)

    @staticmethod
    def media_url(base_url: str, key: str) -> str:
        return f'{base_url}{MEDIA_PREFIX}{quote(key, safe="")}'

    def _put_media(self, key: str, content: bytes, content_type: Optional[str]) -> None:
        self.blob_store.put(f'media:{key}', content, {'contentType': content_type or 'application/octet-stream'})

    def upload_media(self, _provider: FaxService, ctx: ProviderContext, key: str, content: bytes,
                     content_type: Optional[str]) -> Response:
        if not key:
            return error_response(ctx, 'Missing key', 400)

        self._put_media(key, content, content_type)
        media_url = self.media_url(ctx.base_url, key)
        ctx.logger.info('media uploaded', meta={'key': key, 'bytes': len(content), 'mediaUrl': media_url})
        return json_response({'ok': True, 'key': key, 'mediaUrl': media_url, 'bytes': len(content)})

    def serve_media(self, _provider: FaxService, ctx: ProviderContext, key: str) -> Response:
        blob = self.blob_store.get(f'media:{key}')
        if blob is None:
            return error_response(ctx, 'Not found', 404)
        return Response(content=blob.value, media_type=blob.content_type)

    def send_fax(self, provider: FaxService, ctx: ProviderContext, body: RequestBody) -> Response:
        if body.kind == RequestBody.MULTIPART:
            to = body.fields.get('to')
            if not to:
                return error_response(ctx, "missing 'to' field", 400)
            uploaded = body.file('file')
            if uploaded is None:
                return error_response(ctx, "missing 'file' field", 400)

            key = f'fax-out-{ctx.request_id}-{uploaded.filename or uploaded.field}'
            self._put_media(key, uploaded.content, uploaded.content_type)
            ctx.logger.info('uploaded outbound fax media', meta={'key': key, 'bytes': len(uploaded.content)})
        elif body.kind == RequestBody.JSON and isinstance(body.payload, dict):
            to = body.payload.get('to')
            if not to:
                return error_response(ctx, "missing 'to' field", 400)
            key = body.payload.get('media_key')
            if not key:
                return error_response(ctx, "missing 'media_key' field", 400)
        else:
            return error_response(ctx, 'expected multipart/form-data or a JSON object', 400)

        result = provider.send_fax(SendFaxParams(to=to, media_url=self.media_url(ctx.base_url, str(key))), ctx)
        return json_response({'ok': result.ok, 'requestId': ctx.request_id, 'fax': result.fax}, result.status)

    def receive_webhook(self, provider: FaxService, ctx: ProviderContext, path: str, body: RequestBody) -> Response:
        if path != provider.webhook_path:
            return error_response(ctx, 'Not found', 404)
        return provider.handle_webhook(body, ctx)
