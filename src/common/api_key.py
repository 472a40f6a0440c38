import logging
import secrets
from fastapi import Depends, HTTPException, Security, status
from fastapi.security.api_key import APIKeyHeader

from src.config import Settings, get_settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


def unauthorized(detail: str) -> HTTPException:
    logger.warning(f"Rejected request: {detail}")
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_api_key(
    api_key: str | None = Security(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    """Require ``x-api-key`` to match ``TASK_API_KEY`` when one is configured."""
    expected = settings.TASK_API_KEY
    if not expected:
        return

    if not api_key:
        raise unauthorized("API key is missing")

    if not secrets.compare_digest(api_key.encode(), expected.encode()):
        raise unauthorized("API key is invalid")
