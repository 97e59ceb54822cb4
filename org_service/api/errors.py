"""Map membership errors onto problem-detail JSON responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from ..core.errors import ConflictInternal, MembershipError

logger = logging.getLogger(__name__)

def create_error_response(status_code: int, title: str, detail: str, instance: str = None) -> JSONResponse:
    problem = {
        "type": title.lower().replace(" ", "_"),
        "title": title,
        "status": status_code,
        "detail": detail
    }
    if instance:
        problem["instance"] = instance
    return JSONResponse(status_code=status_code, content=problem)

async def membership_error_handler(request: Request, exc: MembershipError) -> JSONResponse:
    if isinstance(exc, ConflictInternal):
        # Details stay in the log
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
        return create_error_response(exc.status_code, exc.title, "INTERNAL_ERROR", request.url.path)
    return create_error_response(exc.status_code, exc.title, exc.code, request.url.path)

def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MembershipError, membership_error_handler)
