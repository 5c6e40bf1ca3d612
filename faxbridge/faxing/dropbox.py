"""
Dropbox Fax (HelloFax / Dropbox Sign) provider.

Sends through POST https://api.hellosign.com/v3/fax/send.
"""
from typing import Any, Dict, Optional

from faxbridge.http import RequestBody

from .auth import basic_auth_header
from .base import FaxService, dig, fax_id_or_default, first_present
from .config import FaxConfig
from .context import ProviderContext
from .enums import FaxProvider
from .types import ProviderSendResult, SendFaxParams


class DropboxFaxService(FaxService):
    name = str(FaxProvider.dropbox_fax)
    storage_prefix = 'dropbox'
    webhook_path = '/dropbox/fax-rx'
    send_fax_url = 'https://api.hellosign.com/v3/fax/send'
    fax_title = 'Fax via faxbridge'

    def auth_header(self, env: FaxConfig) -> Optional[str]:
        if not env.DROPBOX_SIGN_API_KEY:
            return None
        return basic_auth_header(env.DROPBOX_SIGN_API_KEY)

    def send_fax(self, params: SendFaxParams, ctx: ProviderContext) -> ProviderSendResult:
        if not ctx.env.DROPBOX_SIGN_API_KEY:
            return ProviderSendResult.not_configured('DROPBOX_SIGN_API_KEY')

        test_mode = ctx.env.dropbox_test_mode
        payload = {
            'recipient': params.to,
            'file_urls': [params.media_url],
            'test_mode': test_mode,
            'title': self.fax_title,
        }
        if ctx.env.FAX_FROM:
            payload['sender'] = ctx.env.FAX_FROM

        ctx.logger.info('sending fax (dropbox-fax)', meta={
            'to': params.to,
            'from': ctx.env.FAX_FROM,
            'mediaUrl': params.media_url,
            'testMode': test_mode,
        })
        return self._post_json(self.send_fax_url, payload, ctx)

    def _fax_id(self, body: RequestBody, ctx: ProviderContext) -> str:
        if body.kind == RequestBody.JSON:
            fax_id = first_present(
                dig(body.payload, 'fax', 'id'),
                dig(body.payload, 'event', 'fax_id'),
                dig(body.payload, 'id')
            )
        elif body.kind == RequestBody.MULTIPART:
            fax_id = first_present(body.fields.get('fax_id'), body.fields.get('id'))
        else:
            fax_id = first_present(body.fields.get('fax_id'))
        return fax_id_or_default(fax_id, ctx)

    def process_webhook(self, body: RequestBody, ctx: ProviderContext) -> Dict[str, Any]:
        fax_id = self._fax_id(body, ctx)
        files_stored = self.store_files(body, fax_id, ctx)

        file_url = first_present(dig(body.payload, 'file_url'), dig(body.payload, 'fax', 'file_url'))
        if file_url:
            media = self.fetch_media(file_url, ctx)
            if media is not None:
                self.store_media(fax_id, media, ctx)
                files_stored += 1

        self.store_json(self.fax_key(fax_id, 'metadata.json'), body.payload, ctx)
        ctx.logger.info('stored dropbox fax webhook', meta={'faxId': fax_id, 'filesStored': files_stored})
        return {'faxId': fax_id, 'filesStored': files_stored}
