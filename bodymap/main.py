from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bodymap.api.deps import build_services
from bodymap.api.routes import router as api_router
from bodymap.core.config import get_settings
from bodymap.core.errors import (
    HistoryWriteError,
    MarkerEngineError,
    NotFoundError,
    StateError,
    StoreError,
    ValidationError,
)
from bodymap.core.logging import configure_logging

ERROR_STATUS = {
    ValidationError: 422,
    NotFoundError: 404,
    StateError: 409,
    StoreError: 502,
    HistoryWriteError: 502,
}


async def handle_engine_error(request: Request, exc: MarkerEngineError) -> JSONResponse:
    """엔진 예외를 구체적인 상태 코드와 메시지로 변환"""
    status_code = ERROR_STATUS.get(type(exc), 500)
    content = {"error_code": exc.code, "message": exc.message}
    if isinstance(exc, HistoryWriteError):
        content.update({"marker_id": exc.marker_id, "applied": True})
    return JSONResponse(status_code=status_code, content=content)


def create_app() -> FastAPI:
    """애플리케이션을 생성하고 FastAPI를 설정"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Body Map Marker Engine", version=settings.version)
    app.state.services = build_services(settings)
    app.add_exception_handler(MarkerEngineError, handle_engine_error)
    app.include_router(api_router)
    return app


app = create_app()
