from __future__ import annotations

from typing import TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from bodymap.core.config import get_settings
from bodymap.core.errors import StoreError
from bodymap.models.avatar import AvatarPreferences
from bodymap.models.marker import (
    MarkerDraft,
    MarkerHistoryEntry,
    PatientMarker,
    PatientMarkerSnapshot,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _SuccessReply(BaseModel):
    success: bool = False


class _CountReply(BaseModel):
    count: int = Field(default=0, ge=0)


def _parse(model: type[ModelT], data: object, source: str) -> ModelT:
    """API 응답을 모델로 변환, 스키마 불일치는 StoreError"""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise StoreError(
            f"{source} 응답 형식 오류: {model.__name__} ({exc.error_count()}건)"
        ) from exc


class MarkerApiClient:
    """호스팅 마커 API 호출 래퍼

    httpx 예외, 오류 응답, 해석할 수 없는 본문은 StoreError로 변환한다.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.marker_api_url).rstrip("/")
        self._api_key = settings.marker_api_key if api_key is None else api_key
        self._transport = transport

    def _headers(self, acting_user_id: str | None) -> dict:
        headers = {}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        if acting_user_id:
            headers["X-Acting-User"] = acting_user_id
        return headers

    async def request(
        self,
        method: str,
        path: str,
        acting_user_id: str | None = None,
        json: dict | None = None,
        allow_missing: bool = False,
    ) -> dict | list | None:
        """API 요청을 보내고 JSON 본문을 반환

        Args:
            method: HTTP 메서드
            path: 기본 URL 이후 경로
            acting_user_id: 작업자 식별자(선택)
            json: 요청 본문(선택)
            allow_missing: 404를 None으로 처리할지 여부

        Returns:
            응답 JSON, allow_missing이고 404면 None

        Raises:
            StoreError: 네트워크 실패, 오류 응답 또는 JSON이 아닌 응답
        """
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=10.0, transport=self._transport
            ) as client:
                response = await client.request(
                    method, path, json=json, headers=self._headers(acting_user_id)
                )
                if allow_missing and response.status_code == 404:
                    return None
                response.raise_for_status()
                try:
                    return response.json()
                except ValueError as exc:
                    raise StoreError(f"{method} {path} 실패: JSON 응답 아님") from exc
        except httpx.HTTPStatusError as exc:
            raise StoreError(
                f"{method} {path} 실패: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} 실패: {exc}") from exc


class HttpMarkerStore:
    """호스팅 API 기반 마커 저장소"""

    def __init__(self, client: MarkerApiClient | None = None) -> None:
        self._client = client or MarkerApiClient()

    async def get(self, patient_id: str) -> PatientMarkerSnapshot:
        path = f"/patients/{patient_id}/markers"
        data = await self._client.request("GET", path)
        return _parse(PatientMarkerSnapshot, data or {}, f"GET {path}")

    async def get_marker(self, marker_id: str) -> PatientMarker | None:
        path = f"/markers/{marker_id}"
        data = await self._client.request("GET", path, allow_missing=True)
        if data is None:
            return None
        return _parse(PatientMarker, data, f"GET {path}")

    async def create(
        self, request: MarkerDraft, acting_user_id: str | None
    ) -> PatientMarker:
        path = f"/patients/{request.patient_id}/markers"
        data = await self._client.request(
            "POST", path, acting_user_id, json=request.model_dump()
        )
        return _parse(PatientMarker, data, f"POST {path}")

    async def update(
        self, marker_id: str, patch: dict, acting_user_id: str | None
    ) -> PatientMarker:
        path = f"/markers/{marker_id}"
        data = await self._client.request("PATCH", path, acting_user_id, json=patch)
        return _parse(PatientMarker, data, f"PATCH {path}")

    async def _transition(
        self, marker_id: str, action: str, acting_user_id: str | None
    ) -> bool:
        path = f"/markers/{marker_id}/{action}"
        data = await self._client.request("POST", path, acting_user_id)
        return _parse(_SuccessReply, data or {}, f"POST {path}").success

    async def confirm(self, marker_id: str, acting_user_id: str | None) -> bool:
        return await self._transition(marker_id, "confirm", acting_user_id)

    async def reject(self, marker_id: str, acting_user_id: str | None) -> bool:
        return await self._transition(marker_id, "reject", acting_user_id)

    async def deactivate(self, marker_id: str, acting_user_id: str | None) -> bool:
        return await self._transition(marker_id, "deactivate", acting_user_id)

    async def confirm_all_pending(
        self, patient_id: str, acting_user_id: str | None
    ) -> int:
        path = f"/patients/{patient_id}/markers/confirm-all"
        data = await self._client.request("POST", path, acting_user_id)
        return _parse(_CountReply, data or {}, f"POST {path}").count


class HttpHistoryStore:
    """호스팅 API 기반 이력 저장소"""

    def __init__(self, client: MarkerApiClient | None = None) -> None:
        self._client = client or MarkerApiClient()

    async def append(self, entry: MarkerHistoryEntry) -> MarkerHistoryEntry:
        path = f"/markers/{entry.marker_id}/history"
        data = await self._client.request(
            "POST", path, entry.changed_by, json=entry.model_dump()
        )
        return _parse(MarkerHistoryEntry, data, f"POST {path}")

    async def get_for_marker(self, marker_id: str) -> list[MarkerHistoryEntry]:
        path = f"/markers/{marker_id}/history"
        data = await self._client.request("GET", path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"GET {path} 응답 형식 오류: 목록이 아님")
        return [_parse(MarkerHistoryEntry, row, f"GET {path}") for row in data]


class HttpAvatarStore:
    """호스팅 API 기반 아바타 설정 저장소"""

    def __init__(self, client: MarkerApiClient | None = None) -> None:
        self._client = client or MarkerApiClient()

    async def get(self, patient_id: str) -> AvatarPreferences | None:
        path = f"/patients/{patient_id}/avatar"
        data = await self._client.request("GET", path, allow_missing=True)
        if data is None:
            return None
        return _parse(AvatarPreferences, data, f"GET {path}")

    async def save(self, preferences: AvatarPreferences) -> AvatarPreferences:
        path = f"/patients/{preferences.patient_id}/avatar"
        data = await self._client.request("PUT", path, json=preferences.model_dump())
        return _parse(AvatarPreferences, data, f"PUT {path}")
