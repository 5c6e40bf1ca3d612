"""
Tests for the Dropbox Fax provider.
"""
import base64
import json
import logging
import unittest
from unittest.mock import Mock, patch

from faxbridge.faxing.config import FaxConfig
from faxbridge.faxing.context import ProviderContext, RequestLogger
from faxbridge.faxing.dropbox import DropboxFaxService
from faxbridge.faxing.types import SendFaxParams
from faxbridge.http import RequestBody, UploadedFile
from faxbridge.storage.memory import MemoryBlobStore


API_KEY_HEADER = 'Basic ' + base64.b64encode(b'api_key:').decode()


def make_context(blob_store=None, **settings):
    return ProviderContext(
        request_id='req-1',
        base_url='https://fax.example',
        env=FaxConfig(_env_file=None, **settings),
        blob_store=blob_store if blob_store is not None else MemoryBlobStore(),
        logger=RequestLogger(logging.getLogger('tests.dropbox'), 'req-1')
    )


def json_body(payload):
    return RequestBody(kind=RequestBody.JSON, payload=payload, raw_text=json.dumps(payload))


def response_json(response):
    return json.loads(response.body)


class TestDropboxFaxSendFax(unittest.TestCase):
    """Test DropboxFaxService.send_fax."""

    def setUp(self):
        self.service = DropboxFaxService()
        self.params = SendFaxParams(to='+15558675309', media_url='https://fax.example/media/doc.pdf')

    @patch('faxbridge.faxing.base.requests.post')
    def test_posts_fax_send_request(self, mock_post):
        """Test the payload and the API-key-as-username Basic header."""
        mock_post.return_value = Mock(status_code=200, text='{"fax": {"fax_id": "abc"}}')

        result = self.service.send_fax(self.params, make_context(DROPBOX_SIGN_API_KEY='api_key', FAX_FROM='+15550001111'))

        self.assertTrue(result.ok)
        self.assertEqual(result.fax, {'fax': {'fax_id': 'abc'}})
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://api.hellosign.com/v3/fax/send')
        self.assertEqual(kwargs['headers']['authorization'], API_KEY_HEADER)
        self.assertEqual(kwargs['json'], {
            'recipient': '+15558675309',
            'sender': '+15550001111',
            'file_urls': ['https://fax.example/media/doc.pdf'],
            'test_mode': True,
            'title': 'Fax via faxbridge',
        })

    @patch('faxbridge.faxing.base.requests.post')
    def test_sender_omitted_and_test_mode_disabled(self, mock_post):
        """Test DROPBOX_FAX_TEST_MODE=0 turns test mode off and no sender is sent without FAX_FROM."""
        mock_post.return_value = Mock(status_code=200, text='{}')

        self.service.send_fax(self.params, make_context(DROPBOX_SIGN_API_KEY='api_key', DROPBOX_FAX_TEST_MODE='0'))

        body = mock_post.call_args.kwargs['json']
        self.assertFalse(body['test_mode'])
        self.assertNotIn('sender', body)

    @patch('faxbridge.faxing.base.requests.post')
    def test_missing_api_key(self, mock_post):
        """Test the API key is required."""
        result = self.service.send_fax(self.params, make_context(DROPBOX_SIGN_API_KEY=None))

        self.assertFalse(result.ok)
        self.assertEqual(result.status, 500)
        self.assertEqual(result.raw, {'error': 'DROPBOX_SIGN_API_KEY not configured'})
        mock_post.assert_not_called()


class TestDropboxFaxHandleWebhook(unittest.TestCase):
    """Test DropboxFaxService.handle_webhook."""

    def setUp(self):
        self.service = DropboxFaxService()
        self.store = MemoryBlobStore()

    @patch('faxbridge.faxing.base.requests.get')
    def test_file_url_is_downloaded(self, mock_get):
        """Test a referenced fax file is fetched with the Basic header and stored."""
        mock_get.return_value = Mock(status_code=200, content=b'%PDF', headers={'content-type': 'application/pdf'})
        ctx = make_context(self.store, DROPBOX_SIGN_API_KEY='api_key')

        response = self.service.handle_webhook(json_body({
            'fax': {'id': 'fx_1', 'file_url': 'https://api.hellosign.com/v3/fax/files/fx_1'}
        }), ctx)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response_json(response)['faxId'], 'fx_1')
        self.assertEqual(response_json(response)['filesStored'], 1)
        mock_get.assert_called_once_with(
            'https://api.hellosign.com/v3/fax/files/fx_1',
            headers={'authorization': API_KEY_HEADER}
        )
        self.assertEqual(sorted(self.store.keys()), ['dropbox:fax:fx_1.pdf', 'dropbox:fax:fx_1:metadata.json'])

    @patch('faxbridge.faxing.base.requests.get')
    def test_failed_download_still_stores_metadata(self, mock_get):
        """Test a non-2xx file download is skipped."""
        mock_get.return_value = Mock(status_code=404, content=b'', headers={})

        response = self.service.handle_webhook(
            json_body({'event': {'fax_id': 'fx_2'}, 'file_url': 'https://x/f.pdf'}),
            make_context(self.store)
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response_json(response)['filesStored'], 0)
        self.assertEqual(self.store.keys(), ['dropbox:fax:fx_2:metadata.json'])
        mock_get.assert_called_once_with('https://x/f.pdf', headers={})

    @patch('faxbridge.faxing.base.requests.get')
    def test_non_string_file_url_still_stores_metadata(self, mock_get):
        """Test a file_url that is not a string is skipped and metadata.json is still written."""
        response = self.service.handle_webhook(
            json_body({'fax': {'id': 'fx_5', 'file_url': 12345}}),
            make_context(self.store, DROPBOX_SIGN_API_KEY='api_key')
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response_json(response)['filesStored'], 0)
        mock_get.assert_not_called()
        self.assertEqual(self.store.keys(), ['dropbox:fax:fx_5:metadata.json'])

    def test_multipart_stores_files_and_metadata(self):
        """Test one file part and a fax_id field."""
        body = RequestBody(
            kind=RequestBody.MULTIPART,
            payload={'fax_id': 'fx_3'},
            files=[UploadedFile('fax_file', 'fax.pdf', 'application/pdf', b'%PDF-1.3')]
        )

        response = self.service.handle_webhook(body, make_context(self.store))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(sorted(self.store.keys()), ['dropbox:fax:fx_3:fax.pdf', 'dropbox:fax:fx_3:metadata.json'])
        self.assertEqual(json.loads(self.store.get('dropbox:fax:fx_3:metadata.json').text()), {'fax_id': 'fx_3'})

    def test_urlencoded_reads_fax_id(self):
        """Test url-encoded bodies use fax_id."""
        body = RequestBody(kind=RequestBody.URLENCODED, payload={'fax_id': 'fx_4', 'status': 'sent'})

        self.service.handle_webhook(body, make_context(self.store))

        self.assertEqual(json.loads(self.store.get('dropbox:fax:fx_4:metadata.json').text()),
                         {'fax_id': 'fx_4', 'status': 'sent'})

    def test_numeric_fax_id_zero_is_kept(self):
        """Test a fax id of 0 is used as the key rather than the request id."""
        response = self.service.handle_webhook(json_body({'fax': {'id': 0}}), make_context(self.store))

        self.assertEqual(response_json(response)['faxId'], '0')
        self.assertEqual(self.store.keys(), ['dropbox:fax:0:metadata.json'])

    def test_text_body_stores_raw_payload(self):
        """Test an unrecognized body is stored as {'raw': text}."""
        body = RequestBody(kind=RequestBody.TEXT, payload={'raw': '<fax/>'}, raw_text='<fax/>')

        response = self.service.handle_webhook(body, make_context(self.store))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(self.store.get('dropbox:fax:req-1:metadata.json').text()), {'raw': '<fax/>'})


if __name__ == '__main__':
    unittest.main()
