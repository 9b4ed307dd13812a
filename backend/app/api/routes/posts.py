"""GET/POST /posts — liveness probe and validated post creation."""

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from backend.app.core.errors import (
    NormalizedError,
    PostValidationError,
    StorageError,
    normalize_storage_error,
    normalize_unknown_error,
    normalize_validation_error,
)
from backend.app.db.session import get_db
from backend.app.models.post_schemas import (
    ErrorEnvelope,
    PostApiStatus,
    PostCreatedResponse,
    PostRead,
)
from backend.app.services.post_repository import PostRepository, SqlAlchemyPostRepository
from backend.app.services.post_service import create_post
from backend.app.services.validation import validate_post_input

logger = logging.getLogger(__name__)

router = APIRouter()


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return SqlAlchemyPostRepository(db)


@router.get("/posts", response_model=PostApiStatus)
def post_api_status() -> PostApiStatus:
    return PostApiStatus()


@router.post(
    "/posts",
    status_code=201,
    response_model=PostCreatedResponse,
    responses={
        422: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
        503: {"model": ErrorEnvelope},
    },
)
def store_post(
    payload: Any = Body(default=None),
    repository: PostRepository = Depends(get_post_repository),
) -> PostCreatedResponse | JSONResponse:
    """Validate the body, insert one post, and wrap the result in an envelope.

    Every failure is answered here: validation → 422, storage → 500/503,
    anything else → 500.
    """
    correlation_id = str(uuid.uuid4())
    error: NormalizedError
    try:
        dto = validate_post_input(payload)
        post = create_post(repository, dto)
    except PostValidationError as exc:
        error = normalize_validation_error(exc)
    except StorageError as exc:
        error = normalize_storage_error(
            exc, operation="create_post", correlation_id=correlation_id,
        )
    except Exception as exc:
        error = normalize_unknown_error(
            exc, operation="POST /posts", correlation_id=correlation_id,
        )
    else:
        return PostCreatedResponse(data=PostRead.model_validate(post))
    return JSONResponse(status_code=error.http_status, content=error.to_envelope())
