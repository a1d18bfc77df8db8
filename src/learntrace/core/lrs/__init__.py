"""LRS 関連モジュール

xAPI statements リソースへの追記・クエリを行うクライアント。
"""

from learntrace.core.lrs.client import LRSClient
from learntrace.core.lrs.query import StatementQuery, StatementResult

__all__ = [
    "LRSClient",
    "StatementQuery",
    "StatementResult",
]
