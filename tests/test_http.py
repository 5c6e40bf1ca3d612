"""
Tests for request body parsing.
"""
import json
import unittest

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from faxbridge.http import RequestBody, json_response, read_request_body


class TestJsonResponse(unittest.TestCase):

    def test_json_response(self):
        response = json_response({'ok': True}, 201)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.headers['content-type'], 'application/json')
        self.assertEqual(json.loads(response.body), {'ok': True})


class TestReadRequestBody(unittest.TestCase):

    def setUp(self):
        self.parsed = []
        app = FastAPI()

        @app.post('/hook')
        async def hook(request: Request):
            self.parsed.append(await read_request_body(request))
            return {'ok': True}

        self.client = TestClient(app)

    def post(self, **kwargs) -> RequestBody:
        response = self.client.post('/hook', **kwargs)
        self.assertEqual(response.status_code, 200)
        return self.parsed[-1]

    def test_json(self):
        body = self.post(content='{"a": 1}', headers={'content-type': 'application/json; charset=utf-8'})

        self.assertEqual(body.kind, RequestBody.JSON)
        self.assertEqual(body.payload, {'a': 1})
        self.assertEqual(body.raw_text, '{"a": 1}')

    def test_malformed_json_becomes_text(self):
        body = self.post(content='{oops', headers={'content-type': 'application/json'})

        self.assertEqual(body.kind, RequestBody.TEXT)
        self.assertEqual(body.payload, {'raw': '{oops'})

    def test_urlencoded(self):
        body = self.post(
            content='id=f1&note=a+b',
            headers={'content-type': 'application/x-www-form-urlencoded'}
        )

        self.assertEqual(body.kind, RequestBody.URLENCODED)
        self.assertEqual(body.payload, {'id': 'f1', 'note': 'a b'})
        self.assertEqual(body.files, [])

    def test_multipart_fields_and_files(self):
        content = bytes(range(256))

        body = self.post(
            data={'id': 'f1', 'to': '+15558675309'},
            files={'file': ('scan.pdf', content, 'application/pdf')}
        )

        self.assertEqual(body.kind, RequestBody.MULTIPART)
        self.assertEqual(body.fields, {'id': 'f1', 'to': '+15558675309'})
        self.assertEqual(len(body.files), 1)
        uploaded = body.file('file')
        self.assertEqual(uploaded.filename, 'scan.pdf')
        self.assertEqual(uploaded.content_type, 'application/pdf')
        self.assertEqual(uploaded.content, content)
        self.assertIsNone(body.file('missing'))

    def test_multipart_keeps_bytes_of_structured_content_types(self):
        """A forwarded message part is stored as sent, not interpreted."""
        forwarded = b'Subject: hi\r\n\r\nbody bytes'

        body = self.post(files={'file': ('fwd.eml', forwarded, 'message/rfc822')})

        uploaded = body.file('file')
        self.assertEqual(uploaded.filename, 'fwd.eml')
        self.assertEqual(uploaded.content_type, 'message/rfc822')
        self.assertEqual(uploaded.content, forwarded)

    def test_multipart_without_boundary_becomes_text(self):
        body = self.post(content='garbage', headers={'content-type': 'multipart/form-data'})

        self.assertEqual(body.kind, RequestBody.TEXT)
        self.assertEqual(body.raw_text, 'garbage')

    def test_unknown_content_type_is_text(self):
        body = self.post(content='hello', headers={'content-type': 'text/csv'})

        self.assertEqual(body.kind, RequestBody.TEXT)
        self.assertEqual(body.payload, {'raw': 'hello'})
        self.assertEqual(body.fields, {'raw': 'hello'})


if __name__ == '__main__':
    unittest.main()
