"""Serialized proxy responses and the JSON/CORS response builders."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}


@dataclass
class ProxyResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''

    def json(self) -> Any:
        return json.loads(self.body.decode('utf-8'))


def json_response(data: Any, status: int = 200, extra_headers: Dict[str, str] = None) -> ProxyResponse:
    headers = {'Content-Type': 'application/json'}
    headers.update(CORS_HEADERS)
    if extra_headers:
        headers.update(extra_headers)
    body = json.dumps(data, ensure_ascii=False).encode('utf-8')
    return ProxyResponse(status=status, headers=headers, body=body)


def error_response(message: str, status: int) -> ProxyResponse:
    return json_response({'error': message}, status)


def preflight_response() -> ProxyResponse:
    return ProxyResponse(status=204, headers=dict(CORS_HEADERS), body=b'')
