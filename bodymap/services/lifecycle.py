"""마커 수명주기 관리

상태: pending_confirmation → confirmed | rejected. is_active는 confirmed에
도달한 마커에만 의미가 있으며 비활성화는 되돌릴 수 없다. 모든 변경은
저장소에 위임하고 성공한 뒤 이력을 추가한다. 저장소 실패는 재시도 없이
그대로 전파한다. 변경 뒤 이력 추가가 실패하면 HistoryWriteError로 알린다.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from bodymap.catalog.marker_types import DEFAULT_MARKER_CATALOG, MarkerTypeCatalog
from bodymap.catalog.regions import DEFAULT_REGION_INDEX, RegionIndex
from bodymap.core.config import AttentionConfig, load_app_config
from bodymap.core.errors import (
    HistoryWriteError,
    MarkerEngineError,
    NotFoundError,
    StateError,
    StoreError,
    ValidationError,
)
from bodymap.core.logger import log_event
from bodymap.models.marker import (
    HistoryAction,
    MarkerCreateRequest,
    MarkerDraft,
    MarkerHistoryEntry,
    MarkerUpdate,
    PatientMarker,
    TransitionResult,
)
from bodymap.stores.base import HistoryStore, MarkerStore
from bodymap.utils.parsing import (
    clean_text,
    parse_confidence,
    parse_coordinate,
    utc_now_iso,
)

EventSink = Callable[..., None]

UPDATABLE_FIELDS = (
    "category",
    "marker_type",
    "display_name",
    "body_region",
    "position_x",
    "position_y",
    "body_view",
    "details",
    "requires_attention",
)


class MarkerLifecycleManager:
    """개별 마커의 상태 전이를 담당"""

    def __init__(
        self,
        store: MarkerStore,
        history: HistoryStore,
        catalog: MarkerTypeCatalog = DEFAULT_MARKER_CATALOG,
        regions: RegionIndex = DEFAULT_REGION_INDEX,
        attention: AttentionConfig | None = None,
        events: EventSink = log_event,
    ) -> None:
        self._store = store
        self._history = history
        self._catalog = catalog
        self._regions = regions
        self._attention = attention or load_app_config().attention
        self._events = events

    async def create(
        self, request: MarkerCreateRequest, acting_user_id: str | None = None
    ) -> PatientMarker:
        """마커를 생성

        수동/가져오기 마커는 즉시 confirmed, AI 마커는 pending_confirmation으로
        생성한다.

        Args:
            request: 생성 요청
            acting_user_id: 작업자 식별자, 없으면 미귀속

        Returns:
            생성된 마커

        Raises:
            ValidationError: 필수 필드 누락 또는 범위 오류
            NotFoundError: 알 수 없는 타입 또는 부위
            StoreError: 저장소 실패
            HistoryWriteError: 마커는 생성됐으나 이력 기록 실패
        """
        try:
            prepared = self._prepare_create(request)
            marker = await self._store.create(prepared, acting_user_id)
            await self._append(marker.id, "created", None, acting_user_id)
        except MarkerEngineError as exc:
            await self._report_failure("create", request.patient_id, None, exc)
            raise
        await self._emit(
            "marker_created",
            "INFO",
            marker.patient_id,
            "create",
            f"마커 생성 type={marker.marker_type} status={marker.status} "
            f"by={_attribution(acting_user_id)}",
            marker_id=marker.id,
        )
        return marker

    async def update(
        self,
        marker_id: str,
        patch: MarkerUpdate | dict,
        acting_user_id: str | None = None,
    ) -> PatientMarker:
        """마커 필드를 병합 수정, 상태는 변경하지 않음

        Raises:
            ValidationError: 변경 항목이 없거나 값 오류
            NotFoundError: 알 수 없는 마커, 타입, 부위
            StateError: 거부 또는 비활성화된 마커
            StoreError: 저장소 실패
        """
        patient_id: str | None = None
        try:
            marker = await self._require(marker_id)
            patient_id = marker.patient_id
            if not marker.is_visible:
                raise StateError(marker_id, "update", _state_label(marker))
            changes = _extract_changes(patch)
            if not changes:
                raise ValidationError("patch", "변경 항목 없음")
            current = marker.model_dump()
            merged = {**current, **changes}
            self._validate_placement(
                merged.get("marker_type"),
                merged.get("display_name"),
                merged.get("body_region"),
                merged.get("body_view"),
            )
            for axis in ("position_x", "position_y"):
                value = parse_coordinate(merged[axis], axis)
                if axis in changes:
                    changes[axis] = value
            previous = {key: current[key] for key in changes if key in current}
            updated = await self._store.update(marker_id, changes, acting_user_id)
            await self._append(marker_id, "updated", previous, acting_user_id)
        except MarkerEngineError as exc:
            await self._report_failure("update", patient_id, marker_id, exc)
            raise
        await self._emit(
            "marker_updated",
            "INFO",
            updated.patient_id,
            "update",
            f"마커 수정 fields={','.join(sorted(previous))} by={_attribution(acting_user_id)}",
            marker_id=marker_id,
        )
        return updated

    async def confirm(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        """확인 대기 마커를 확인, 주의 플래그 해제

        Returns:
            전이 결과(pending_delta=-1)

        Raises:
            NotFoundError: 알 수 없는 마커
            StateError: 확인 대기 상태가 아님
            StoreError: 저장소 실패
        """
        return await self._resolve_pending(
            marker_id,
            acting_user_id,
            "confirmed",
            {"status": "confirmed", "requires_attention": False},
        )

    async def reject(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        """확인 대기 마커를 거부, 레코드는 감사용으로 유지

        Returns:
            전이 결과(pending_delta=-1)
        """
        return await self._resolve_pending(
            marker_id, acting_user_id, "rejected", {"status": "rejected"}
        )

    async def deactivate(
        self, marker_id: str, acting_user_id: str | None = None
    ) -> TransitionResult:
        """확인된 활성 마커를 비활성화(종료 상태)

        Raises:
            NotFoundError: 알 수 없는 마커
            StateError: 확인되지 않았거나 이미 비활성화된 마커
            StoreError: 저장소 실패
        """
        patient_id: str | None = None
        try:
            marker = await self._require(marker_id)
            patient_id = marker.patient_id
            if marker.status != "confirmed" or not marker.is_active:
                raise StateError(marker_id, "deactivate", _state_label(marker))
            if not await self._store.deactivate(marker_id, acting_user_id):
                raise StoreError(f"비활성화 실패: marker={marker_id}")
            await self._append(
                marker_id, "deactivated", {"is_active": True}, acting_user_id
            )
        except MarkerEngineError as exc:
            await self._report_failure("deactivate", patient_id, marker_id, exc)
            raise
        await self._emit(
            "marker_deactivated",
            "INFO",
            marker.patient_id,
            "deactivate",
            f"마커 비활성화 by={_attribution(acting_user_id)}",
            marker_id=marker_id,
        )
        return TransitionResult(
            marker=marker.model_copy(update={"is_active": False}),
            action="deactivated",
        )

    async def confirm_all_pending(
        self, patient_id: str, acting_user_id: str | None = None
    ) -> int:
        """환자의 모든 확인 대기 마커를 한 번에 확인

        원자성은 저장소가 보장한다. 저장소가 실패하면 이력을 남기지 않고
        StoreError를 전파한다.

        Returns:
            확인된 마커 수
        """
        try:
            snapshot = await self._store.get(patient_id)
            pending = [
                marker
                for marker in snapshot.markers
                if marker.is_visible and marker.status == "pending_confirmation"
            ]
            if not pending:
                return 0
            count = await self._store.confirm_all_pending(patient_id, acting_user_id)
            for marker in pending:
                await self._append(
                    marker.id,
                    "confirmed",
                    {
                        "status": marker.status,
                        "requires_attention": marker.requires_attention,
                    },
                    acting_user_id,
                )
        except MarkerEngineError as exc:
            await self._report_failure("confirm_all", patient_id, None, exc)
            raise
        if count != len(pending):
            await self._emit(
                "bulk_confirm_mismatch",
                "WARNING",
                patient_id,
                "confirm_all",
                f"확인 수 불일치 expected={len(pending)} actual={count}",
                record_count=count,
            )
        await self._emit(
            "markers_bulk_confirmed",
            "INFO",
            patient_id,
            "confirm_all",
            f"대기 마커 일괄 확인 by={_attribution(acting_user_id)}",
            record_count=count,
        )
        return count

    async def history(self, marker_id: str) -> list[MarkerHistoryEntry]:
        """마커 이력을 조회

        Raises:
            NotFoundError: 알 수 없는 마커
        """
        await self._require(marker_id)
        return await self._history.get_for_marker(marker_id)

    async def _resolve_pending(
        self,
        marker_id: str,
        acting_user_id: str | None,
        action: HistoryAction,
        changes: dict,
    ) -> TransitionResult:
        verb = "confirm" if action == "confirmed" else "reject"
        patient_id: str | None = None
        try:
            marker = await self._require(marker_id)
            patient_id = marker.patient_id
            if marker.status != "pending_confirmation" or not marker.is_active:
                raise StateError(marker_id, verb, _state_label(marker))
            if verb == "confirm":
                ok = await self._store.confirm(marker_id, acting_user_id)
            else:
                ok = await self._store.reject(marker_id, acting_user_id)
            if not ok:
                raise StoreError(f"{verb} 실패: marker={marker_id}")
            previous = {key: getattr(marker, key) for key in changes}
            await self._append(marker_id, action, previous, acting_user_id)
        except MarkerEngineError as exc:
            await self._report_failure(verb, patient_id, marker_id, exc)
            raise
        await self._emit(
            f"marker_{action}",
            "INFO",
            marker.patient_id,
            verb,
            f"마커 {action} by={_attribution(acting_user_id)}",
            marker_id=marker_id,
        )
        return TransitionResult(
            marker=marker.model_copy(update=changes), action=action, pending_delta=-1
        )

    async def _require(self, marker_id: str) -> PatientMarker:
        marker = await self._store.get_marker(marker_id)
        if marker is None:
            raise NotFoundError("marker", marker_id)
        return marker

    async def _append(
        self,
        marker_id: str,
        action: HistoryAction,
        previous: dict | None,
        acting_user_id: str | None,
    ) -> None:
        entry = MarkerHistoryEntry(
            marker_id=marker_id,
            action=action,
            previous_values=previous,
            changed_by=acting_user_id,
            created_at=utc_now_iso(),
        )
        try:
            await self._history.append(entry)
        except StoreError as exc:
            raise HistoryWriteError(marker_id, action, exc.message) from exc

    async def _emit(self, *args, **kwargs) -> None:
        await asyncio.to_thread(self._events, *args, **kwargs)

    def _validate_placement(
        self,
        marker_type: object,
        display_name: object,
        body_region: object,
        body_view: object,
    ) -> tuple[str, str, str]:
        type_key = clean_text(marker_type)
        if type_key is None:
            raise ValidationError("marker_type", "값이 필요함")
        if clean_text(display_name) is None:
            raise ValidationError("display_name", "값이 필요함")
        region = clean_text(body_region)
        if region is None:
            raise ValidationError("body_region", "값이 필요함")
        if self._catalog.get(type_key) is None:
            raise NotFoundError("marker_type", type_key)
        if not self._regions.has_region(region, str(body_view)):
            raise NotFoundError("body_region", f"{region}@{body_view}")
        return type_key, region, str(body_view)

    def _prepare_create(self, request: MarkerCreateRequest) -> MarkerDraft:
        if clean_text(request.patient_id) is None:
            raise ValidationError("patient_id", "값이 필요함")
        type_key, region_id, view = self._validate_placement(
            request.marker_type,
            request.display_name,
            request.body_region,
            request.body_view,
        )
        definition = self._catalog.get(type_key)
        region = self._regions.get(region_id)
        x = request.position_x if request.position_x is not None else region.center.x
        y = request.position_y if request.position_y is not None else region.center.y

        if request.source == "smartscribe":
            confidence = parse_confidence(request.confidence_score)
            if confidence is None:
                raise ValidationError("confidence_score", "AI 마커는 신뢰도가 필요함")
            status = "pending_confirmation"
            attention = (
                request.requires_attention
                or confidence < self._attention.confidence_threshold
            )
        else:
            confidence = None
            status = "confirmed"
            attention = request.requires_attention

        return MarkerDraft(
            **{
                **request.model_dump(),
                "category": request.category or definition.category,
                "marker_type": type_key,
                "display_name": clean_text(request.display_name),
                "body_region": region_id,
                "body_view": view,
                "position_x": parse_coordinate(x, "position_x"),
                "position_y": parse_coordinate(y, "position_y"),
                "status": status,
                "is_active": True,
                "confidence_score": confidence,
                "requires_attention": attention,
            }
        )

    async def _report_failure(
        self,
        action: str,
        patient_id: str | None,
        marker_id: str | None,
        exc: MarkerEngineError,
    ) -> None:
        if isinstance(exc, HistoryWriteError):
            event, marker_id = "history_append_failed", exc.marker_id
        else:
            event = f"{action}_failed"
        await self._emit(
            event,
            "ERROR" if isinstance(exc, StoreError) else "WARNING",
            patient_id,
            action,
            exc.message,
            marker_id=marker_id,
            error_code=exc.code,
        )


def _attribution(acting_user_id: str | None) -> str:
    return acting_user_id or "unattributed"


def _state_label(marker: PatientMarker) -> str:
    if marker.status == "confirmed" and not marker.is_active:
        return "deactivated"
    return marker.status


def _extract_changes(patch: MarkerUpdate | dict) -> dict:
    if not isinstance(patch, MarkerUpdate):
        try:
            patch = MarkerUpdate.model_validate(patch)
        except PydanticValidationError as exc:
            field = ".".join(str(part) for part in exc.errors()[0]["loc"]) or "patch"
            raise ValidationError(field, exc.errors()[0]["msg"]) from exc
    data = patch.model_dump(exclude_unset=True)
    for key in ("category", "body_view", "requires_attention", "details"):
        if key in data and data[key] is None:
            raise ValidationError(key, "값이 필요함")
    return {key: value for key, value in data.items() if key in UPDATABLE_FIELDS}
