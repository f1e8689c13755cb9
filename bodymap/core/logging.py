import logging

CONTEXT_FIELDS = {"event": "system", "patient_id": "-", "marker_id": "-"}
LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s event=%(event)s "
    "patient=%(patient_id)s marker=%(marker_id)s %(message)s"
)


class MarkerContextFormatter(logging.Formatter):
    """마커 컨텍스트 필드가 없는 레코드에 기본값을 채우는 포매터"""

    def format(self, record: logging.LogRecord) -> str:
        for field, default in CONTEXT_FIELDS.items():
            if not hasattr(record, field):
                setattr(record, field, default)
        return super().format(record)


def configure_logging(level: str) -> None:
    """루트 로깅 설정, 외부 HTTP 클라이언트 로그는 WARNING 이상만 출력

    Args:
        level: 로깅 레벨 문자열
    """
    handler = logging.StreamHandler()
    handler.setFormatter(MarkerContextFormatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler])
    logging.getLogger("httpx").setLevel(logging.WARNING)
