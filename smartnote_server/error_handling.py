# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Translate AuthError kinds to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from smartnote_server.errors import AuthError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.USER_NOT_FOUND: 404,
    ErrorKind.MISSING_TOKEN: 401,
    ErrorKind.TOKEN_EXPIRED: 401,
    ErrorKind.TOKEN_INVALID: 401,
    ErrorKind.TOKEN_REVOKED: 401,
    ErrorKind.RESET_ALREADY_PENDING: 429,
    ErrorKind.INVALID_OR_EXPIRED_OTP: 400,
    ErrorKind.PASSWORD_UNCHANGED: 400,
    ErrorKind.EMAIL_DELIVERY_FAILED: 502,
}

def check_status_map(mapping: dict[ErrorKind, int]) -> None:
    missing = set(ErrorKind) - set(mapping)
    if missing:
        raise RuntimeError(f"ErrorKind without HTTP status: {sorted(k.value for k in missing)}")


check_status_map(STATUS_BY_KIND)


def error_response(exc: AuthError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.kind.value},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
        log_fn = logger.error if STATUS_BY_KIND[exc.kind] >= 500 else logger.info
        log_fn("%s %s -> %s", request.method, request.url.path, exc.kind.value)
        return error_response(exc)
