"""
Mock college registry API.

POST  /verify_email                        register a college (bearer token required)
GET   /get_college/{college_id}            fetch one registration
GET   /get_all_colleges                    list registrations (admin)
PATCH /update_college_status/{college_id}  change status (admin)
GET   /health                              liveness
"""

import re
from typing import Any, Dict, List, Optional, Tuple

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from config.settings import MAX_UPLOAD_BYTES
from registry.store import CollegeRegistry, RecordNotFound, StoredFile, utc_timestamp

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = [
    "collegeName", "phone", "email", "address", "establishedYear",
    "representativeName", "representativePhone", "representativeEmail",
    "coordinatorName", "coordinatorPhone", "coordinatorEmail", "coordinatorDesignation",
    "feeConcession", "bankName", "accountNumber", "confirmAccountNumber", "ifscCode",
]

# field -> (regex, message); optional fields are only checked when present
FORMAT_CHECKS: Dict[str, Tuple[str, str]] = {
    "establishedYear": (r"\d+", "The Established Year field must contain only numbers."),
    "accountNumber": (r"\d+", "The Account Number field must contain only numbers."),
    "ifscCode": (r"[A-Z]{4}0[A-Z0-9]{6}", "Invalid IFSC Code format."),
    "passPercentage": (r"\d+(\.\d+)?%?", "The Pass % field must contain only numbers."),
}


class RegistryHTTPError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class StatusUpdate(BaseModel):
    status: str


router = APIRouter()


def get_registry(request: Request) -> CollegeRegistry:
    return request.app.state.registry


def require_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise RegistryHTTPError(401, "No authorization token provided")

    token = auth_header.split("Bearer ", 1)[1].strip()
    if not token:
        raise RegistryHTTPError(401, "Invalid authorization token")

    # Presence only; the mock does not verify the token
    logger.debug("registration_token_received", token_prefix=token[:20])
    return token


async def _read_registration(request: Request, max_upload_bytes: int) -> Tuple[Dict[str, str], Dict[str, List[StoredFile]], Dict[str, str]]:
    content_type = request.headers.get("content-type", "")
    fields: Dict[str, str] = {}
    files: Dict[str, List[StoredFile]] = {}
    file_errors: Dict[str, str] = {}

    if content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                content = await value.read()
                if len(content) > max_upload_bytes:
                    file_errors[key] = f"{value.filename} exceeds the maximum allowed file size."
                    continue
                files.setdefault(key, []).append(
                    StoredFile(
                        name=value.filename or key,
                        size=len(content),
                        content_type=value.content_type or "application/octet-stream",
                        content=content,
                    )
                )
            else:
                fields[key] = value
        return fields, files, file_errors

    try:
        body = await request.json()
    except ValueError:
        raise RegistryHTTPError(400, "Invalid request body")
    if not isinstance(body, dict):
        raise RegistryHTTPError(400, "Invalid request body")

    fields = {str(k): "" if v is None else str(v) for k, v in body.items()}
    return fields, files, file_errors


def _format_errors(fields: Dict[str, str]) -> Dict[str, str]:
    errors = {}
    for name, (regex, message) in FORMAT_CHECKS.items():
        value = fields.get(name)
        if value and not re.fullmatch(regex, value.strip()):
            errors[name] = message
    return errors


@router.post("/verify_email", status_code=201)
async def verify_email(
    request: Request,
    _token: str = Depends(require_bearer_token),
    registry: CollegeRegistry = Depends(get_registry),
):
    fields, files, file_errors = await _read_registration(request, request.app.state.max_upload_bytes)

    for field in REQUIRED_FIELDS:
        if not fields.get(field):
            raise RegistryHTTPError(400, f"Missing required field: {field}")

    if fields["accountNumber"] != fields["confirmAccountNumber"]:
        raise RegistryHTTPError(400, "Account numbers do not match")

    errors = {**_format_errors(fields), **file_errors}
    if errors:
        logger.info("registration_rejected", fields=sorted(errors))
        return JSONResponse(status_code=422, content={"status": False, "message": errors, "data": []})

    record = registry.create(fields, files)
    logger.info("college_registered", college_id=record.id, attachments=sorted(files))

    return {
        "success": True,
        "message": "College registration submitted successfully",
        "collegeId": record.id,
        "status": record.status,
        "submittedAt": record.submittedAt,
    }


@router.get("/get_college/{college_id}")
async def get_college(college_id: str, registry: CollegeRegistry = Depends(get_registry)):
    record = registry.get(college_id)
    return {"success": True, **record.to_public()}


@router.get("/get_all_colleges")
async def get_all_colleges(registry: CollegeRegistry = Depends(get_registry)):
    return {"success": True, "colleges": [r.to_public() for r in registry.list_all()]}


@router.patch("/update_college_status/{college_id}")
async def update_college_status(
    college_id: str,
    update: StatusUpdate,
    registry: CollegeRegistry = Depends(get_registry),
):
    record = registry.update_status(college_id, update.status)
    return {
        "success": True,
        "message": f"College status updated to {update.status}",
        "college": record.to_public(),
    }


@router.get("/health")
async def health():
    return {"status": "OK", "timestamp": utc_timestamp()}


def _error_body(message: str) -> Dict[str, Any]:
    return {"success": False, "message": message}


def create_app(registry: Optional[CollegeRegistry] = None, max_upload_bytes: int = MAX_UPLOAD_BYTES) -> FastAPI:
    app = FastAPI(title="College Registry (mock)")
    app.state.registry = registry if registry is not None else CollegeRegistry()
    app.state.max_upload_bytes = max_upload_bytes

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RegistryHTTPError)
    async def registry_http_error_handler(request: Request, exc: RegistryHTTPError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.exception_handler(RecordNotFound)
    async def not_found_handler(request: Request, exc: RecordNotFound):
        return JSONResponse(status_code=404, content=_error_body("College not found"))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("registry_request_failed", path=request.url.path)
        return JSONResponse(status_code=500, content=_error_body("Internal server error"))

    app.include_router(router)
    return app
