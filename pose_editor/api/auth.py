from __future__ import annotations

from fastapi import HTTPException, Request


def resolve_token_from_request(request: Request) -> str:
    token = request.query_params.get("token")
    if token:
        return token
    token = request.cookies.get("editor_token")
    if token:
        return token
    token = request.headers.get("x-access-token")
    if token:
        return token
    return ""


def require_http_token(request: Request, expected_token: str) -> str:
    token = resolve_token_from_request(request)
    if not expected_token or token == expected_token:
        return token
    raise HTTPException(status_code=401, detail="invalid token")
