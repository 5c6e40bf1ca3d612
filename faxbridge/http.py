"""
Request body parsing shared by the gateway routes and vendor webhooks.

Bodies are branched on their declared content type. Forms go through
Starlette's form parser (python-multipart); anything that cannot be decoded
as declared degrades to raw text instead of being rejected.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException


def json_response(data: Any, status: int = 200) -> JSONResponse:
    return JSONResponse(data, status_code=status)


@dataclass
class UploadedFile:
    field: str
    filename: Optional[str]
    content_type: str
    content: bytes


@dataclass
class RequestBody:
    """
    A request body after content-type branching.

    ``payload`` is the decoded JSON value, a dict of text fields for
    multipart and url-encoded bodies, or ``{'raw': text}`` for anything else.
    """
    JSON = 'json'
    MULTIPART = 'multipart'
    URLENCODED = 'urlencoded'
    TEXT = 'text'

    kind: str
    payload: Any
    files: List[UploadedFile] = field(default_factory=list)
    raw_text: str = ''

    @property
    def fields(self) -> Dict[str, Any]:
        return self.payload if isinstance(self.payload, dict) else {}

    def file(self, field_name: str) -> Optional[UploadedFile]:
        for uploaded in self.files:
            if uploaded.field == field_name:
                return uploaded
        return None


async def read_request_body(request: Request) -> RequestBody:
    """
    Reads and parses a request body by its content type. Never raises on
    malformed input.
    """
    raw = await request.body()
    text = raw.decode('utf-8', errors='replace')
    content_type = (request.headers.get('content-type') or '').lower()

    if 'multipart/form-data' in content_type:
        # Starlette needs a boundary to split the parts at all.
        if 'boundary=' in content_type:
            parsed = await _read_form(request, RequestBody.MULTIPART, text)
            if parsed is not None:
                return parsed
    elif 'application/json' in content_type:
        try:
            return RequestBody(kind=RequestBody.JSON, payload=json.loads(raw), raw_text=text)
        except ValueError:
            pass
    elif 'application/x-www-form-urlencoded' in content_type:
        parsed = await _read_form(request, RequestBody.URLENCODED, text)
        if parsed is not None:
            return parsed

    return RequestBody(kind=RequestBody.TEXT, payload={'raw': text}, raw_text=text)


async def _read_form(request: Request, kind: str, text: str) -> Optional[RequestBody]:
    try:
        form = await request.form()
    except (MultiPartException, HTTPException, ValueError):
        return None

    fields: Dict[str, str] = {}
    files: List[UploadedFile] = []
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            files.append(UploadedFile(
                field=name,
                filename=value.filename,
                content_type=value.content_type or 'application/octet-stream',
                content=await value.read()
            ))
        else:
            fields[name] = value

    return RequestBody(kind=kind, payload=fields, files=files, raw_text=text)
