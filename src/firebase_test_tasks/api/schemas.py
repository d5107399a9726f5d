from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthzResponse(BaseModel):
    status: str = Field(default="ok")


class TaskRequest(BaseModel):
    action: str = Field(min_length=1, description="get / set / update / push / add / remove / delete")
    path: str = Field(default="", description="スラッシュ区切りのパス")
    options: dict[str, Any] | None = Field(default=None, description="クエリ・書き込みオプション")
    data: Any = Field(default=None, description="書き込みデータ (JSON)")


class TaskResponse(BaseModel):
    result: Any = None


class TaskListResponse(BaseModel):
    tasks: list[str]
