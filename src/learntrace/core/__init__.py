"""LearnTrace Core モジュール

学習記録のバックエンドロジックを提供:
- Statements: xAPI ステートメントモデルとビルダー
- LRS: Learning Record Store クライアント
- Projections: ステートメント列からの状態計算
- Config: 設定管理
"""

from .config import LearnTraceSettings, get_settings, reload_settings
from .errors import (
    LearnTraceError,
    LRSClientError,
    NotFoundError,
    RejectedError,
    TransportError,
    ValidationError,
)
from .lrs import LRSClient, StatementQuery, StatementResult
from .projections import (
    OutcomeProgress,
    ProgressProjector,
    ProjectProjector,
    ProjectView,
    build_outcome_progress,
    build_project_views,
)
from .statements import (
    ActorKey,
    Learner,
    Statement,
    StatementBuilder,
    parse_statement,
    validate_statement,
)

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "LearnTraceSettings",
    # Errors
    "LearnTraceError",
    "LRSClientError",
    "NotFoundError",
    "RejectedError",
    "TransportError",
    "ValidationError",
    # Statements
    "ActorKey",
    "Learner",
    "Statement",
    "StatementBuilder",
    "parse_statement",
    "validate_statement",
    # LRS
    "LRSClient",
    "StatementQuery",
    "StatementResult",
    # Projections
    "OutcomeProgress",
    "ProgressProjector",
    "ProjectProjector",
    "ProjectView",
    "build_outcome_progress",
    "build_project_views",
]
