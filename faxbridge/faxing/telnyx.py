from typing import Any, Dict, Optional

from faxbridge.http import RequestBody

from .auth import bearer_auth_header
from .base import FaxService, dig, fax_id_or_default, first_present
from .config import FaxConfig
from .context import ProviderContext
from .enums import FaxProvider
from .types import ProviderSendResult, SendFaxParams


class TelnyxService(FaxService):
    name = str(FaxProvider.telnyx)
    webhook_path = '/telnyx/fax-rx'
    send_fax_url = 'https://api.telnyx.com/v2/faxes'
    required_settings = ('TELNYX_API_KEY', 'CONNECTION_ID', 'FAX_FROM')

    def auth_header(self, env: FaxConfig) -> Optional[str]:
        if not env.TELNYX_API_KEY:
            return None
        return bearer_auth_header(env.TELNYX_API_KEY)

    def send_fax(self, params: SendFaxParams, ctx: ProviderContext) -> ProviderSendResult:
        missing = ctx.env.first_missing(*self.required_settings)
        if missing:
            return ProviderSendResult.not_configured(missing)

        ctx.logger.info('sending fax (telnyx)', meta={
            'to': params.to,
            'from': ctx.env.FAX_FROM,
            'mediaUrl': params.media_url,
        })

        return self._post_json(self.send_fax_url, {
            'connection_id': ctx.env.CONNECTION_ID,
            'from': ctx.env.FAX_FROM,
            'to': params.to,
            'media_url': params.media_url,
            'quality': 'high',
            't38_enabled': True,
            'webhook_url': self.webhook_url(ctx),
        }, ctx)

    def process_webhook(self, body: RequestBody, ctx: ProviderContext) -> Dict[str, Any]:
        if body.kind != RequestBody.JSON:
            fax_id = fax_id_or_default(first_present(body.fields.get('fax_id'), body.fields.get('id')), ctx)
            return {'faxId': fax_id, 'filesStored': self.store_body(body, fax_id, ctx)}

        event_type = dig(body.payload, 'data', 'event_type') or 'unknown'
        payload = dig(body.payload, 'data', 'payload')
        fax_id = fax_id_or_default(first_present(dig(payload, 'fax_id')), ctx)
        # Keep the whole event when it lacks the usual envelope.
        record = payload if payload is not None else body.payload

        ctx.logger.info('telnyx fax webhook', meta={
            'eventType': event_type,
            'faxId': fax_id,
            'from': dig(payload, 'from'),
            'to': dig(payload, 'to'),
            'direction': dig(payload, 'direction'),
            'status': dig(payload, 'status'),
            'pageCount': dig(payload, 'page_count'),
        })

        if event_type != 'fax.received':
            ctx.logger.info(f'event {event_type}, storing metadata')
            self.store_json(self.fax_key(fax_id, f'{event_type}.json'), record, ctx)
            return {'faxId': fax_id, 'filesStored': 0}

        media_url = dig(payload, 'media_url')
        if media_url:
            media = self.fetch_media(media_url, ctx)
            if media is not None:
                self.store_media(fax_id, media, ctx)
                return {'faxId': fax_id, 'filesStored': 1}
        else:
            ctx.logger.info('fax.received but no media_url')

        self.store_json(self.fax_key(fax_id, 'meta.json'), record, ctx)
        return {'faxId': fax_id, 'filesStored': 0}
