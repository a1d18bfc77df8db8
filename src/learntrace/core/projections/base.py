"""投影の共通部品

投影が依存するステートメント取得元のプロトコルと、最新ステートメントの選択。
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from ..lrs.query import StatementQuery
from ..statements import Statement


class StatementSource(Protocol):
    """投影が読み出すステートメントの取得元

    LRSClient がこのプロトコルを満たす。
    """

    async def query_all(
        self,
        query: StatementQuery | None = None,
        timeout: float | None = None,
    ) -> list[Statement]: ...


def ordering_key(statement: Statement) -> tuple[datetime, str]:
    """畳み込みの順序キー

    タイムスタンプが同じ場合は、IDの辞書順で大きい方を新しいとみなす。
    """
    return (statement.timestamp, statement.id)


def latest_statement(statements: Iterable[Statement]) -> Statement | None:
    """最新のステートメントを選択する（入力順には依存しない）"""
    return max(statements, key=ordering_key, default=None)
