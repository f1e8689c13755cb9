from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수에서 애플리케이션 설정을 로드"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    environment: Literal["local", "dev", "prod"] = "local"
    version: str = "0.1.0"
    log_level: str = "INFO"
    admin_id: str = "admin"
    admin_password: str = "admin"
    config_path: str = "bodymap.yaml"
    duckdb_path: str = "data/telemetry.duckdb"
    store_backend: Literal["memory", "http"] = "memory"
    marker_api_url: str = "http://localhost:9000"
    marker_api_key: str = ""


class BadgeLayout(BaseModel):
    """상태 배지 슬롯 배치 설정(다이어그램 백분율 좌표)"""

    top_y: float = 4.0
    top_spacing: float = 12.0
    side_start_y: float = 12.0
    side_spacing: float = 10.0
    left_x: float = 6.0
    right_x: float = 94.0


class AttentionConfig(BaseModel):
    """주의 플래그 계산 설정"""

    confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class AppConfig(BaseModel):
    """마커 엔진 설정 래퍼"""

    badges: BadgeLayout = Field(default_factory=BadgeLayout)
    attention: AttentionConfig = Field(default_factory=AttentionConfig)


@lru_cache
def get_settings() -> Settings:
    """캐시된 설정 인스턴스를 반환"""
    return Settings()


@lru_cache
def load_app_config() -> AppConfig:
    """설정 파일(YAML)에서 엔진 설정 로드

    파일이 없으면 기본값을 사용한다.

    Returns:
        엔진 설정 인스턴스
    """
    settings = get_settings()
    path = Path(settings.config_path)
    if not path.exists():
        return AppConfig()
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return AppConfig(**data)


def reload_app_config() -> AppConfig:
    """설정 캐시를 초기화하고 다시 로드

    Returns:
        엔진 설정 인스턴스
    """
    load_app_config.cache_clear()
    return load_app_config()
