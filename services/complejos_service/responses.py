import logging
from typing import Any, Dict, Iterable, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Error terminal de la petición, se responde con el sobre de error."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def success_response(
    status_code: int,
    message: str,
    data: Any = None,
    token: Optional[str] = None,
) -> JSONResponse:
    """Sobre de éxito {status, code, message, data?, token?}."""
    content = {"status": "success", "code": status_code, "message": message}
    if data is not None:
        content["data"] = data
    if token is not None:
        content["token"] = token
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "code": status_code, "message": message},
    )


def format_errors(errors: Iterable[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def invalid_payload(detail: str) -> APIError:
    return APIError(status.HTTP_400_BAD_REQUEST, f"Invalid JSON format: {detail}")


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Dependencia que lee el cuerpo como objeto JSON.

    Se declara después de la autenticación para que un token inválido
    se rechace antes de mirar el cuerpo.
    """
    try:
        data = await request.json()
    except ValueError as e:
        raise invalid_payload(str(e))
    if not isinstance(data, dict):
        raise invalid_payload("expected a JSON object")
    return data


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # JSON mal formado o payload que no encaja con el esquema -> 400, no 422
    detail = format_errors(exc.errors())
    logger.info(f"Payload inválido en {request.method} {request.url.path}: {detail}")
    return error_response(status.HTTP_400_BAD_REQUEST, f"Invalid JSON format: {detail}")
