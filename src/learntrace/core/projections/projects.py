"""プロジェクト投影

アクターのステートメントからプロジェクトごとの現在状態を計算する。
プロジェクトは独立したレコードを持たず、常にイベントから再計算される。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..lrs.query import StatementQuery
from ..statements import ActivityType, ActorKey, Extension, Statement
from .base import StatementSource, ordering_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectKey:
    """プロジェクトの識別キー (アクター, project-id)"""

    actor: ActorKey
    project_id: str


@dataclass(frozen=True)
class ProjectView:
    """プロジェクトの現在状態

    全フィールドは最新ステートメント1件から取る。
    タイトル等を持たないステートメントが最新なら、その値は None になる。
    """

    id: str
    owner: ActorKey
    title: str | None = None
    theme: str | None = None
    stage: str | None = None
    language: str | None = None
    last_updated: datetime | None = None
    statement_id: str | None = None

    @classmethod
    def from_statement(cls, key: ProjectKey, statement: Statement) -> ProjectView:
        return cls(
            id=key.project_id,
            owner=key.actor,
            title=statement.object_extension(Extension.TITLE.value),
            theme=statement.object_extension(Extension.THEME.value),
            stage=statement.object_extension(Extension.STAGE.value),
            language=statement.object_extension(Extension.LANGUAGE.value),
            last_updated=statement.timestamp,
            statement_id=statement.id,
        )


def is_project_statement(statement: Statement) -> bool:
    """プロジェクトのアクティビティタイプかつ project-id を持つか"""
    definition = statement.object_.definition
    if definition is None or definition.type != ActivityType.LANGUAGE_PROJECT.value:
        return False
    return bool(definition.extensions.get(Extension.PROJECT_ID.value))


def build_project_views(statements: Iterable[Statement]) -> list[ProjectView]:
    """ステートメント列からプロジェクト投影を構築

    ProjectKey ごとに順序キー最大のステートメントを選ぶ。
    結果は最終更新の新しい順、同時刻ならプロジェクトID順。

    Args:
        statements: ステートメント（順序不問）

    Returns:
        プロジェクトの現在状態のリスト
    """
    latest: dict[ProjectKey, Statement] = {}
    for statement in statements:
        if not is_project_statement(statement):
            continue
        key = ProjectKey(
            actor=statement.actor.key,
            project_id=str(statement.object_extension(Extension.PROJECT_ID.value)),
        )
        current = latest.get(key)
        if current is None or ordering_key(statement) > ordering_key(current):
            latest[key] = statement

    views = sorted(
        (ProjectView.from_statement(key, st) for key, st in latest.items()),
        key=lambda v: (v.id, v.owner.name, v.owner.home_page),
    )
    views.sort(key=lambda v: v.last_updated, reverse=True)
    return views


class ProjectProjector:
    """アクターのプロジェクト投影を計算するプロジェクター

    Args:
        source: ステートメントの取得元（LRSClient 等）
    """

    def __init__(self, source: StatementSource) -> None:
        self._source = source

    async def project_projects_for(
        self,
        actor: ActorKey,
        timeout: float | None = None,
    ) -> list[ProjectView]:
        """アクターが所有するプロジェクトと各々の最新段階を取得

        LRS はアクティビティタイプで絞り込めないため、
        アクターで取得した後にタイプで絞り込む。

        Raises:
            TransportError: クエリに失敗した場合（部分的な結果は返さない）
        """
        statements = await self._source.query_all(StatementQuery(agent=actor), timeout=timeout)
        owned = [s for s in statements if s.actor.key == actor]
        views = build_project_views(owned)
        logger.debug(
            "Projected %d projects from %d statements for %s",
            len(views),
            len(statements),
            actor.name,
        )
        return views
