"""LearnTrace ステートメントモデル

xAPI ステートメントの定義、語彙、ビルダー。
全ての学習イベントはLRSに追記され、変更・削除されない。
"""

# --- 語彙 ---
from .vocabulary import (
    OUTCOME_DEFINITIONS,
    ActivityType,
    Extension,
    LearningOutcome,
    OutcomeDefinition,
    ProjectStage,
    VerbId,
    get_uri,
    verb_display,
)

# --- スキーマ ---
from .base import (
    Account,
    Activity,
    ActivityDefinition,
    ActorKey,
    Agent,
    Context,
    Result,
    Score,
    Statement,
    Verb,
    generate_statement_id,
    parse_statement,
    validate_statement,
)

# --- ビルダー ---
from .builder import (
    PROMPT_PREVIEW_LENGTH,
    Learner,
    StatementBuilder,
    generate_project_id,
)

__all__ = [
    # 語彙
    "OUTCOME_DEFINITIONS",
    "ActivityType",
    "Extension",
    "LearningOutcome",
    "OutcomeDefinition",
    "ProjectStage",
    "VerbId",
    "get_uri",
    "verb_display",
    # スキーマ
    "Account",
    "Activity",
    "ActivityDefinition",
    "ActorKey",
    "Agent",
    "Context",
    "Result",
    "Score",
    "Statement",
    "Verb",
    "generate_statement_id",
    "parse_statement",
    "validate_statement",
    # ビルダー
    "PROMPT_PREVIEW_LENGTH",
    "Learner",
    "StatementBuilder",
    "generate_project_id",
]
