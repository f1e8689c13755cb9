from typing import Literal

from pydantic import BaseModel, Field

from bodymap.models.catalog import BodyView, MarkerCategory

MarkerSource = Literal["manual", "smartscribe", "import"]
MarkerStatus = Literal["pending_confirmation", "confirmed", "rejected"]
HistoryAction = Literal["created", "updated", "confirmed", "rejected", "deactivated"]


class PatientMarker(BaseModel):
    """환자 신체 지도에 배치된 임상 마커"""

    id: str = Field(..., description="마커 식별자")
    patient_id: str = Field(..., description="환자 식별자")
    category: MarkerCategory
    marker_type: str = Field(..., description="마커 타입 키")
    display_name: str = Field(..., description="표시 이름")
    body_region: str = Field(..., description="부위 식별자")
    position_x: float = Field(..., ge=0, le=100)
    position_y: float = Field(..., ge=0, le=100)
    body_view: BodyView = "front"
    source: MarkerSource = "manual"
    status: MarkerStatus = "confirmed"
    is_active: bool = True
    confidence_score: float | None = Field(default=None, ge=0, le=1)
    details: dict = Field(default_factory=dict, description="임상 메모(불투명)")
    requires_attention: bool = False
    created_at: str = Field(..., description="생성 시각(UTC ISO8601)")
    updated_at: str = Field(..., description="수정 시각(UTC ISO8601)")

    @property
    def is_visible(self) -> bool:
        """활성 상태이며 거부되지 않은 마커인지 여부"""
        return self.is_active and self.status != "rejected"


class MarkerCreateRequest(BaseModel):
    """마커 생성 요청

    필수 여부는 수명주기 관리자가 검증한다.
    """

    patient_id: str = ""
    category: MarkerCategory | None = None
    marker_type: str | None = None
    display_name: str | None = None
    body_region: str | None = None
    position_x: float | None = None
    position_y: float | None = None
    body_view: BodyView = "front"
    source: MarkerSource = "manual"
    confidence_score: float | None = None
    details: dict = Field(default_factory=dict)
    requires_attention: bool = False


class MarkerDraft(MarkerCreateRequest):
    """검증을 마치고 저장소에 넘기는 생성 데이터, 초기 상태 포함"""

    status: MarkerStatus
    is_active: bool = True


class MarkerUpdate(BaseModel):
    """마커 수정 패치(상태 필드는 포함하지 않음)"""

    category: MarkerCategory | None = None
    marker_type: str | None = None
    display_name: str | None = None
    body_region: str | None = None
    position_x: float | None = None
    position_y: float | None = None
    body_view: BodyView | None = None
    details: dict | None = None
    requires_attention: bool | None = None


class MarkerHistoryEntry(BaseModel):
    """마커 변경 이력(추가 전용)"""

    id: str | None = None
    marker_id: str
    action: HistoryAction
    previous_values: dict | None = None
    changed_by: str | None = Field(default=None, description="작업자, 없으면 미귀속")
    created_at: str


class PatientMarkerSnapshot(BaseModel):
    """저장소에서 조회한 환자 마커 목록과 집계"""

    markers: list[PatientMarker] = Field(default_factory=list)
    pending_count: int = 0
    attention_count: int = 0

    @classmethod
    def from_markers(cls, markers: list[PatientMarker]) -> "PatientMarkerSnapshot":
        """마커 목록으로 대기/주의 집계를 계산

        Args:
            markers: 환자 마커 목록

        Returns:
            집계가 포함된 스냅샷
        """
        visible = [marker for marker in markers if marker.is_visible]
        return cls(
            markers=markers,
            pending_count=sum(
                1 for marker in visible if marker.status == "pending_confirmation"
            ),
            attention_count=sum(1 for marker in visible if marker.requires_attention),
        )

    @property
    def active_count(self) -> int:
        return sum(1 for marker in self.markers if marker.is_visible)


class TransitionResult(BaseModel):
    """상태 전이 결과"""

    marker: PatientMarker
    action: HistoryAction
    pending_delta: int = 0
