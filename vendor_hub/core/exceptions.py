"""Application-level exceptions and FastAPI exception handlers."""


from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str | int | None = None):
        msg = f"{entity} not found" if entity_id is None else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ConflictError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=409, code="CONFLICT")

class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=422, code="VALIDATION_ERROR")

# ---------------------------------------------------------------------------
# Vendor identity & credential errors
# ---------------------------------------------------------------------------

class IdentifierUnresolvable(AppException):
    """A vendor-like object carries none of the identifying fields."""

    def __init__(self, vendor_like: object = None):
        super().__init__(
            "Cannot determine vendor identifier. Vendor must have instanceSlug, "
            f"vendorSlug, vendorShortCode, or name. Got: {vendor_like!r}",
            status_code=422,
            code="IDENTIFIER_UNRESOLVABLE",
        )

class OrganizationRequired(AppException):
    def __init__(self, message: str = "Organization scope is required"):
        super().__init__(message, status_code=400, code="ORGANIZATION_REQUIRED")

class SchemaValidationError(AppException):
    """Credential payload does not match the vendor type's declared fields."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, status_code=422, code="SCHEMA_VALIDATION_ERROR")

class StorageError(AppException):
    """Transport or constraint failure in the storage layer (caller may retry)."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, status_code=503, code="STORAGE_ERROR")

class CredentialsNotFound(AppException):
    def __init__(self, organization_id: int, vendor_type_id: int):
        self.organization_id = organization_id
        self.vendor_type_id = vendor_type_id
        super().__init__(
            f"No credentials stored for vendor type {vendor_type_id} "
            f"in organization {organization_id}",
            status_code=404,
            code="CREDENTIALS_NOT_FOUND",
        )

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, field: str | None = None) -> dict:
    error = {"code": code, "message": message}
    if field:
        error["field"] = field
    return {"error": error}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, getattr(exc, "field", None)),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
