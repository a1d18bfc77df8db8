"""LearnTrace 例外クラス

ステートメントの検証エラーと、LRSクライアントの通信・拒否・未検出エラー。
"""

from __future__ import annotations


class LearnTraceError(Exception):
    """LearnTrace の基底例外"""


class ValidationError(LearnTraceError):
    """ステートメントの必須フィールド欠落・型不正"""


class LRSClientError(LearnTraceError):
    """LRS クライアントに関するエラー

    Attributes:
        status_code: HTTP ステータスコード（HTTP応答に由来しない場合は None）
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(LRSClientError):
    """通信失敗・認証失敗・タイムアウト・期限切れ"""


class RejectedError(LRSClientError):
    """LRS がステートメントを不正として拒否した"""


class NotFoundError(LRSClientError):
    """指定IDのステートメントが存在しない"""
