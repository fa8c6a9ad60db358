"""
Shared request helpers for the DisasterLens routers.
"""

from typing import Type, TypeVar
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError
from disasterlens.core.errors import NotFoundError, StoreError
from disasterlens.observability.logging_setup import get_logger

log = get_logger("disasterlens.api")

M = TypeVar("M", bound=BaseModel)


def parse_body(model: Type[M], payload: dict) -> M:
    """요청 본문을 검증합니다. 실패 시 400."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        ]
        raise HTTPException(status_code=400, detail="; ".join(errors))


def store_failure(error: StoreError, message: str) -> HTTPException:
    """저장소 오류를 HTTP 오류로 변환합니다."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=f"{error.kind.capitalize()} not found")
    log.error(f"{message}: {error}")
    return HTTPException(status_code=500, detail=message)
