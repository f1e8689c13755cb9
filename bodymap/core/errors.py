class MarkerEngineError(Exception):
    """마커 엔진 예외의 기본 클래스"""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ValidationError(MarkerEngineError):
    """필수 필드 누락 또는 값 범위 오류 시 발생"""

    def __init__(self, field: str, message: str) -> None:
        super().__init__("MK_VALID_001", f"{field}: {message}")
        self.field = field


class NotFoundError(MarkerEngineError):
    """알 수 없는 마커, 마커 타입, 신체 부위 참조 시 발생"""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__("MK_NOTFOUND_001", f"{kind} 없음: {key}")
        self.kind = kind
        self.key = key


class StateError(MarkerEngineError):
    """허용되지 않는 상태 전이 시 발생"""

    def __init__(self, marker_id: str, action: str, current: str) -> None:
        super().__init__(
            "MK_STATE_001", f"{action} 불가: marker={marker_id} 현재 상태={current}"
        )
        self.marker_id = marker_id
        self.action = action
        self.current = current


class StoreError(MarkerEngineError):
    """외부 저장소 또는 네트워크 실패 시 발생"""

    def __init__(self, message: str) -> None:
        super().__init__("MK_STORE_001", message)


class HistoryWriteError(StoreError):
    """저장소 변경은 적용됐으나 이력 추가에 실패한 경우 발생

    호출자는 마커가 이미 새 상태라는 것을 전제로 다시 조회해야 한다.
    """

    def __init__(self, marker_id: str, action: str, cause: str) -> None:
        MarkerEngineError.__init__(
            self,
            "MK_HISTORY_001",
            f"이력 기록 실패(변경은 적용됨): marker={marker_id} action={action}: {cause}",
        )
        self.marker_id = marker_id
        self.action = action
