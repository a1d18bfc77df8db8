"""投影 (Projections) - ステートメント列から読み取りモデルを計算"""

from .base import StatementSource, latest_statement, ordering_key
from .progress import (
    DEFAULT_OUTCOMES,
    OutcomeProgress,
    ProgressProjector,
    build_outcome_progress,
)
from .projects import (
    ProjectKey,
    ProjectProjector,
    ProjectView,
    build_project_views,
    is_project_statement,
)

__all__ = [
    "StatementSource",
    "latest_statement",
    "ordering_key",
    "DEFAULT_OUTCOMES",
    "OutcomeProgress",
    "ProgressProjector",
    "build_outcome_progress",
    "ProjectKey",
    "ProjectProjector",
    "ProjectView",
    "build_project_views",
    "is_project_statement",
]
