from __future__ import annotations

from typing import Any

from firebase_test_tasks.api.errors import ErrorResponse

ERROR_RESPONSES: dict[int, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "リクエスト不正"},
    404: {"model": ErrorResponse, "description": "タスクなし"},
    422: {"model": ErrorResponse, "description": "入力バリデーション不正"},
    500: {"model": ErrorResponse, "description": "想定外エラー"},
    502: {"model": ErrorResponse, "description": "ストアエラー"},
}


def error_responses(*codes: int) -> dict[int, dict[str, Any]]:
    responses: dict[int, dict[str, Any]] = {}
    for code in codes:
        if code in ERROR_RESPONSES:
            responses[code] = ERROR_RESPONSES[code]
    return responses
