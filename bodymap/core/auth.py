from __future__ import annotations

import base64
import binascii

from fastapi import HTTPException, Request, status

from bodymap.core.config import get_settings

ACTING_USER_HEADER = "X-Acting-User"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def require_admin(request: Request) -> None:
    """관리자 인증 검증

    Args:
        request: FastAPI 요청 객체

    Raises:
        HTTPException: 인증 실패 시
    """
    settings = get_settings()
    credentials = request.headers.get("Authorization", "")
    if not credentials.startswith("Basic "):
        raise _unauthorized("인증 필요")

    encoded = credentials.replace("Basic ", "", 1).strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise _unauthorized("인증 정보 오류") from exc

    if ":" not in decoded:
        raise _unauthorized("인증 정보 오류")

    admin_id, admin_password = decoded.split(":", 1)
    if admin_id != settings.admin_id or admin_password != settings.admin_password:
        raise _unauthorized("인증 실패")


def get_acting_user(request: Request) -> str | None:
    """세션 계층이 전달한 작업자 식별자를 반환

    헤더가 없으면 None(미귀속)으로 처리하며 요청을 거부하지 않는다.
    """
    value = request.headers.get(ACTING_USER_HEADER, "").strip()
    return value or None
