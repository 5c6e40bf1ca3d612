"""
Sinch Fax API provider.

Docs: https://developers.sinch.com/docs/fax/overview/ (v3)
"""
from typing import Any, Dict, Optional

from faxbridge.http import RequestBody

from .auth import basic_auth_header
from .base import FaxService, dig, fax_id_or_default, first_present
from .config import FaxConfig
from .context import ProviderContext
from .enums import FaxProvider
from .types import ProviderSendResult, SendFaxParams


class SinchService(FaxService):
    name = str(FaxProvider.sinch)
    webhook_path = '/sinch/fax-rx'
    base_url = 'https://fax.api.sinch.com/v3'

    def auth_header(self, env: FaxConfig) -> Optional[str]:
        if not (env.SINCH_ACCESS_KEY and env.SINCH_SECRET_KEY):
            return None
        return basic_auth_header(env.SINCH_ACCESS_KEY, env.SINCH_SECRET_KEY)

    def send_fax_url(self, project_id: str) -> str:
        return f'{self.base_url}/projects/{project_id}/faxes'

    def send_fax(self, params: SendFaxParams, ctx: ProviderContext) -> ProviderSendResult:
        if not ctx.env.SINCH_PROJECT_ID:
            return ProviderSendResult.not_configured('SINCH_PROJECT_ID')
        if not (ctx.env.SINCH_ACCESS_KEY and ctx.env.SINCH_SECRET_KEY):
            return ProviderSendResult.not_configured('SINCH_ACCESS_KEY or SINCH_SECRET_KEY')

        url = self.send_fax_url(ctx.env.SINCH_PROJECT_ID)
        payload = {
            'to': params.to,
            'from': ctx.env.FAX_FROM or '',
            'contentUrl': params.media_url,
        }

        ctx.logger.info('sending fax (sinch)', meta={'url': url, **payload})
        return self._post_json(url, payload, ctx)

    def _fax_id(self, body: RequestBody, ctx: ProviderContext) -> str:
        if body.kind == RequestBody.JSON:
            fax_id = first_present(
                dig(body.payload, 'id'),
                dig(body.payload, 'fax_id'),
                dig(body.payload, 'data', 'id')
            )
        else:
            fax_id = first_present(body.fields.get('id'), body.fields.get('faxId'))
        return fax_id_or_default(fax_id, ctx)

    def process_webhook(self, body: RequestBody, ctx: ProviderContext) -> Dict[str, Any]:
        fax_id = self._fax_id(body, ctx)
        files_stored = self.store_body(body, fax_id, ctx)

        content_url = first_present(dig(body.payload, 'contentUrl'), dig(body.payload, 'file_url'))
        if content_url and not body.files:
            media = self.fetch_media(content_url, ctx)
            if media is not None:
                self.store_media(fax_id, media, ctx)
                files_stored += 1

        return {'faxId': fax_id, 'filesStored': files_stored}
