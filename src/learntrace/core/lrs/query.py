"""ステートメントクエリ

LRS の GET /statements に渡すフィルタと、その応答。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..statements import ActorKey, Statement


class StatementQuery(BaseModel):
    """クエリフィルタ

    未指定 (None) のフィールドはクエリパラメータに含めない。
    """

    model_config = {"frozen": True}

    agent: ActorKey | None = Field(default=None, description="アクター")
    activity: str | None = Field(default=None, description="アクティビティURI")
    verb: str | None = Field(default=None, description="動詞URI")
    related_activities: bool | None = None
    registration: str | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int | None = Field(default=None, ge=0)
    ascending: bool | None = None

    def to_params(self) -> dict[str, Any]:
        """xAPI クエリパラメータに変換"""
        params: dict[str, Any] = {}
        if self.agent is not None:
            params["agent"] = self.agent.to_json()
        if self.activity is not None:
            params["activity"] = self.activity
        if self.verb is not None:
            params["verb"] = self.verb
        if self.related_activities is not None:
            params["related_activities"] = "true" if self.related_activities else "false"
        if self.registration is not None:
            params["registration"] = self.registration
        if self.since is not None:
            params["since"] = self.since.isoformat()
        if self.until is not None:
            params["until"] = self.until.isoformat()
        if self.limit is not None:
            params["limit"] = self.limit
        if self.ascending is not None:
            params["ascending"] = "true" if self.ascending else "false"
        return params


@dataclass
class StatementResult:
    """クエリ結果

    Attributes:
        statements: 返却されたステートメント（時刻順とは限らない）
        more: 続きを取得するための継続URL（なければ None）
        count: 今回返却された件数（総一致件数ではない）
    """

    statements: list[Statement] = field(default_factory=list)
    more: str | None = None

    @property
    def count(self) -> int:
        return len(self.statements)
