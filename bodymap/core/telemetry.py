from __future__ import annotations

import threading
from pathlib import Path

import duckdb

from bodymap.core.config import get_settings

LOG_COLUMNS = (
    "timestamp",
    "level",
    "event",
    "patient_id",
    "action",
    "marker_id",
    "error_code",
    "message",
    "record_count",
)
STATUS_COLUMNS = (
    "patient_id",
    "updated_at",
    "active_count",
    "pending_count",
    "attention_count",
)


class TelemetryStore:
    """마커 감사 이벤트와 환자별 집계를 보관하는 DuckDB 저장소"""

    _instance: "TelemetryStore | None" = None
    _lock = threading.Lock()

    def __new__(cls) -> "TelemetryStore":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._connect()
                cls._instance = instance
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """싱글턴 연결을 닫고 다음 호출에서 다시 연결"""
        with cls._lock:
            if cls._instance is not None:
                cls._instance._conn.close()
            cls._instance = None

    def _connect(self) -> None:
        path = Path(get_settings().duckdb_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(str(path))
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                timestamp TIMESTAMP,
                level VARCHAR,
                event VARCHAR,
                patient_id VARCHAR,
                action VARCHAR,
                marker_id VARCHAR,
                error_code VARCHAR,
                message VARCHAR,
                record_count INTEGER
            )
            """
        )
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS patient_status (
                patient_id VARCHAR PRIMARY KEY,
                updated_at TIMESTAMP,
                active_count INTEGER,
                pending_count INTEGER,
                attention_count INTEGER
            )
            """
        )

    def _insert(self, statement: str, columns: tuple[str, ...], record: dict) -> None:
        placeholders = ", ".join("?" for _ in columns)
        with self._lock:
            self._conn.execute(
                f"{statement} ({', '.join(columns)}) VALUES ({placeholders})",
                [record.get(column) for column in columns],
            )

    def insert_log(self, record: dict) -> None:
        """감사 이벤트 한 건을 저장

        Args:
            record: LOG_COLUMNS 키를 가진 딕셔너리, 없는 키는 NULL
        """
        self._insert("INSERT INTO logs", LOG_COLUMNS, record)

    def update_status(self, status: dict) -> None:
        """환자 집계를 patient_id 기준으로 교체"""
        self._insert("INSERT OR REPLACE INTO patient_status", STATUS_COLUMNS, status)

    def query_logs(
        self,
        event: str | None = None,
        patient_id: str | None = None,
        marker_id: str | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        """필터 조건으로 감사 이벤트를 시간순 조회

        Args:
            event: 이벤트 이름(선택)
            patient_id: 환자 식별자(선택)
            marker_id: 마커 식별자(선택)
            limit: 최대 행 수(선택)

        Returns:
            컬럼 이름을 키로 하는 행 목록
        """
        filters = {"event": event, "patient_id": patient_id, "marker_id": marker_id}
        clauses = [f"{column} = ?" for column, value in filters.items() if value]
        params: list = [value for value in filters.values() if value]
        query = "SELECT * FROM logs"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY timestamp"
        if limit:
            query += " LIMIT ?"
            params.append(limit)
        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [dict(zip(LOG_COLUMNS, row)) for row in rows]

    def query_status(self) -> list[dict]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM patient_status ORDER BY patient_id"
            ).fetchall()
        return [dict(zip(STATUS_COLUMNS, row)) for row in rows]
