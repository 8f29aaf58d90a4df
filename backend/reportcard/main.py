"""FastAPI application entrypoint.

This module builds the Report Card API: it mounts the routers from
`reportcard.routes`, installs the request-logging middleware and maps
domain errors to HTTP responses. Every error, including request
validation failures, is returned in one envelope::

    {"success": false, "message": ..., "error": ..., "statusCode": ...,
     "timestamp": ..., "path": ...}

Interactive documentation is served at /docs.
"""

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from http import HTTPStatus
from typing import List, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .database import create_db_and_tables
from .exceptions import ReportCardError
from .routes import academic, relationships, users
from .schemas import ErrorResponse

TAGS = [
    {"name": "Roles", "description": "System roles"},
    {"name": "Grades", "description": "Grade levels"},
    {"name": "Subjects", "description": "Curriculum subjects"},
    {"name": "Users", "description": "User accounts"},
    {"name": "Students", "description": "Student profiles"},
    {"name": "Teachers", "description": "Teacher profiles"},
    {"name": "Grade Records", "description": "Evaluation scores"},
    {"name": "Teacher Grades", "description": "Teacher to grade assignments"},
    {"name": "Grade Subjects", "description": "Grade curricula"},
    {"name": "Teacher Subjects", "description": "Teacher to subject assignments"},
    {"name": "Student Teacher Subjects", "description": "Student to teacher and subject assignments per academic period"},
]

app = FastAPI(
    title=settings.API_TITLE,
    version="2.0",
    description="School records API: users, grades, subjects, scores and teaching assignments.",
    openapi_tags=TAGS,
)
logger = logging.getLogger("reportcard.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()

for router in (
    users.roles,
    academic.grades,
    academic.subjects,
    users.users,
    users.students,
    users.teachers,
    academic.grade_records,
    relationships.teacher_grades,
    relationships.grade_subjects,
    relationships.teacher_subjects,
    relationships.assignments,
):
    app.include_router(router)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    summary = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        summary["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(summary, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    summary["status_code"] = response.status_code
    summary["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info("request_done %s", json.dumps(summary, ensure_ascii=True))
    return response


def error_response(request: Request, status_code: int, message: Union[str, List[str]], error: str) -> JSONResponse:
    """Render the shared error envelope."""
    body = ErrorResponse(
        message=message,
        error=error,
        status_code=status_code,
        timestamp=datetime.now(timezone.utc),
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


@app.exception_handler(ReportCardError)
async def report_card_error_handler(request: Request, exc: ReportCardError):
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(request, exc.status_code, exc.message, exc.error)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    logger.warning("%s %s -> 400 %s", request.method, request.url.path, "; ".join(messages))
    return error_response(request, 400, messages, "Bad Request")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return error_response(request, exc.status_code, str(exc.detail), HTTPStatus(exc.status_code).phrase)


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "env": settings.ENV}
