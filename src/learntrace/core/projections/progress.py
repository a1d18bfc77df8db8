"""学習成果進捗の投影

学習成果ごとに最新の "achieved" ステートメントから達成レベルを求める。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..lrs.query import StatementQuery
from ..statements import (
    ActorKey,
    Extension,
    LearningOutcome,
    Statement,
    StatementBuilder,
    VerbId,
)
from .base import StatementSource, latest_statement

logger = logging.getLogger(__name__)

DEFAULT_OUTCOMES: tuple[str, ...] = tuple(outcome.value for outcome in LearningOutcome)


@dataclass(frozen=True)
class OutcomeProgress:
    """1つの学習成果の進捗

    達成ステートメントがない場合は score=0, timestamp=None, evidence=None。
    """

    score: float = 0
    timestamp: datetime | None = None
    evidence: str | None = None


def build_outcome_progress(statements: Iterable[Statement]) -> OutcomeProgress:
    """達成ステートメント列から進捗を構築（入力順には依存しない）"""
    latest = latest_statement(statements)
    if latest is None:
        return OutcomeProgress()

    score: float = 0
    if latest.result is not None and latest.result.score is not None:
        if latest.result.score.raw is not None:
            score = latest.result.score.raw

    return OutcomeProgress(
        score=score,
        timestamp=latest.timestamp,
        evidence=latest.result_extension(Extension.EVIDENCE.value),
    )


class ProgressProjector:
    """アクターの学習成果進捗を計算するプロジェクター

    学習成果ごとのクエリは互いに独立しているため並行に発行する。

    Args:
        source: ステートメントの取得元（LRSClient 等）
        builder: アクティビティIDの組み立てに使うビルダー
        outcomes: 対象の学習成果ID（列挙順が出力順）
        max_concurrency: 同時に発行するクエリ数の上限
    """

    def __init__(
        self,
        source: StatementSource,
        builder: StatementBuilder | None = None,
        outcomes: Sequence[str] = DEFAULT_OUTCOMES,
        max_concurrency: int = 5,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._source = source
        self._builder = builder or StatementBuilder()
        self._outcomes = tuple(outcomes)
        self._max_concurrency = max_concurrency

    @property
    def outcomes(self) -> tuple[str, ...]:
        return self._outcomes

    async def project_progress_for(
        self,
        actor: ActorKey,
        timeout: float | None = None,
    ) -> dict[str, OutcomeProgress]:
        """全学習成果の進捗を取得

        いずれかのクエリが失敗した時点で残りのクエリをキャンセルし、
        例外をそのまま送出する。一部だけの結果は返さない。

        Args:
            actor: 対象アクター
            timeout: クエリごとの期限秒（None で設定値）

        Returns:
            学習成果ID → 進捗（self.outcomes の順）

        Raises:
            TransportError: いずれかのクエリに失敗した場合
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _project_outcome(outcome_id: str) -> OutcomeProgress:
            activity_id = self._builder.outcome_activity_id(outcome_id)
            query = StatementQuery(
                agent=actor,
                activity=activity_id,
                verb=VerbId.ACHIEVED.value,
            )
            async with semaphore:
                statements = await self._source.query_all(query, timeout=timeout)
            achieved = [
                s
                for s in statements
                if s.verb.id == VerbId.ACHIEVED.value
                and s.object_.id == activity_id
                and s.actor.key == actor
            ]
            return build_outcome_progress(achieved)

        tasks = [asyncio.create_task(_project_outcome(o)) for o in self._outcomes]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.warning("Progress projection for %s failed; no partial result", actor.name)
            raise

        return dict(zip(self._outcomes, results, strict=True))
