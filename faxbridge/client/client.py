"""Client for the fax gateway HTTP API."""
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from faxbridge.faxing.auth import basic_auth_header
from faxbridge.faxing.types import DecodedBody

logger = logging.getLogger(__name__)


class FaxGatewayError(Exception):
    """Raised when the gateway answers with a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class FaxGatewayClient:
    def __init__(self, gateway_url: str, username: Optional[str] = None, password: Optional[str] = None):
        self.gateway_url = gateway_url.rstrip('/')
        self.auth_header = basic_auth_header(username, password) if username and password else None

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = dict(extra or {})
        if self.auth_header:
            headers['authorization'] = self.auth_header
        return headers

    def _media_url(self, key: str) -> str:
        return f'{self.gateway_url}/media/{quote(key, safe="")}'

    def upload_media(self, key: str, content: bytes, content_type: str = 'application/pdf') -> Dict[str, Any]:
        """Uploads a document; returns ``{ok, key, mediaUrl, bytes}``."""
        response = requests.put(
            self._media_url(key),
            data=content,
            headers=self._headers({'content-type': content_type})
        )
        if not response.ok:
            raise FaxGatewayError(f'Media upload failed ({response.status_code}): {response.text}',
                                  response.status_code, response.text)
        return response.json()

    def get_media(self, key: str) -> bytes:
        response = requests.get(self._media_url(key))
        if not response.ok:
            raise FaxGatewayError(f'Media download failed ({response.status_code}): {response.reason}',
                                  response.status_code, response.text)
        return response.content

    def send_fax(self, to: str, media_key: str) -> Dict[str, Any]:
        """Sends a fax of an already uploaded document."""
        response = requests.post(
            f'{self.gateway_url}/fax/send',
            json={'to': to, 'media_key': media_key},
            headers=self._headers()
        )
        return self._send_result(response)

    def send_fax_with_file(self, to: str, content: bytes, filename: str = 'document.pdf') -> Dict[str, Any]:
        """Uploads ``content`` and sends it in a single multipart request."""
        response = requests.post(
            f'{self.gateway_url}/fax/send',
            data={'to': to},
            files={'file': (filename, content, 'application/pdf')},
            headers=self._headers()
        )
        return self._send_result(response)

    def upload_and_send_fax(self, to: str, content: bytes, key: str) -> Dict[str, Any]:
        upload = self.upload_media(key, content)
        logger.info("Uploaded: %s (%s bytes)", upload.get('mediaUrl'), upload.get('bytes'))
        return self.send_fax(to, key)

    @staticmethod
    def _send_result(response: requests.Response) -> Dict[str, Any]:
        body = DecodedBody.decode(response.text)
        if not response.ok:
            raise FaxGatewayError(f'Fax send failed ({response.status_code}): {response.text}',
                                  response.status_code, body.value)
        if not body.is_json:
            raise FaxGatewayError('Fax send returned a non-JSON body', response.status_code, body.value)
        return body.value
