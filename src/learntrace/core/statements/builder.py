"""ステートメントビルダー

プラットフォームが発行する学習イベント（プロジェクト、AIツール利用、
プロンプト設計、学習成果達成）のステートメントを組み立てる。
I/O は行わない純粋なコンストラクタ群。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from ulid import ULID

from ..config import VocabularyConfig
from ..errors import ValidationError
from .base import (
    Account,
    Activity,
    ActivityDefinition,
    Agent,
    Context,
    Result,
    Score,
    Statement,
    Verb,
    generate_statement_id,
)
from .vocabulary import (
    OUTCOME_DEFINITIONS,
    ActivityType,
    Extension,
    LearningOutcome,
    ProjectStage,
    VerbId,
    verb_display,
)

# プロンプト本文はプレビューのみ保持する（省略記号を含めてこの長さ以内）
PROMPT_PREVIEW_LENGTH = 100
PROMPT_ELLIPSIS = "..."

PROMPT_SCORE_MIN = 0
PROMPT_SCORE_MAX = 10
ACHIEVEMENT_SCORE_MIN = 0
ACHIEVEMENT_SCORE_MAX = 100

DEFAULT_PROMPT_TECHNIQUE = "chain-of-thought"


def generate_project_id() -> str:
    """プロジェクトIDを生成 (proj_ + ULID、生成順にソート可能)"""
    return f"proj_{ULID()}"


@dataclass(frozen=True)
class Learner:
    """ステートメントの主体となる利用者

    Attributes:
        id: 安定したアカウント名
        name: 表示名
        role: 利用者ロール（learner, teacher 等）
    """

    id: str
    name: str
    role: str = "learner"


class StatementBuilder:
    """xAPI ステートメントビルダー

    Args:
        config: 語彙設定（省略時はデフォルト値）
    """

    def __init__(self, config: VocabularyConfig | None = None) -> None:
        self._config = config or VocabularyConfig()
        self._activity_base = self._config.activity_base.rstrip("/")

    @property
    def activity_base(self) -> str:
        return self._activity_base

    # ------------------------------------------------------------------
    # 共通部品
    # ------------------------------------------------------------------

    def create_actor(self, learner: Learner) -> Agent:
        """利用者からアクターを生成

        Raises:
            ValidationError: アカウント名が空の場合
        """
        try:
            return Agent(
                name=learner.name,
                account=Account(name=learner.id, home_page=self._config.home_page),
            )
        except PydanticValidationError as exc:
            raise ValidationError(f"不正なアクターです: {exc}") from exc

    def create_context(self, role: str, stage: str | None = None) -> Context:
        """コンテキストを生成

        登録IDは呼び出しごとに新規発行する。
        """
        extensions: dict[str, Any] = {Extension.USER_ROLE.value: role}
        if stage:
            extensions[Extension.PROJECT_STAGE.value] = stage
        return Context(
            registration=generate_statement_id(),
            platform=self._config.platform,
            language=self._config.language,
            extensions=extensions,
        )

    def project_activity_id(self, project_id: str) -> str:
        return f"{self._activity_base}/project/{project_id}"

    def outcome_activity_id(self, outcome_id: str) -> str:
        return f"{self._activity_base}/ilo/{outcome_id}"

    @staticmethod
    def _verb(verb_id: VerbId) -> Verb:
        return Verb(id=verb_id.value, display=verb_display(verb_id))

    @staticmethod
    def _statement(**fields: Any) -> Statement:
        """ステートメントを生成。pydantic の検証エラーは ValidationError に変換する"""
        try:
            return Statement(**fields)
        except PydanticValidationError as exc:
            raise ValidationError(f"ステートメントを構築できません: {exc}") from exc

    # ------------------------------------------------------------------
    # プロジェクト
    # ------------------------------------------------------------------

    def build_project_statement(
        self,
        learner: Learner,
        project_id: str,
        stage: str,
        language: str,
        extra_extensions: dict[str, Any] | None = None,
    ) -> Statement:
        """プロジェクト段階のステートメントを生成

        動詞は段階に関わらず常に "initialized"。段階遷移として記録する場合は
        build_stage_progression_statement を使う。

        Args:
            learner: 利用者
            project_id: プロジェクトID
            stage: プロジェクト段階
            language: 学習対象言語
            extra_extensions: 追加の拡張（タイトル・テーマ等）

        Returns:
            生成されたステートメント
        """
        return self._project_statement(
            VerbId.INITIALIZED, learner, project_id, stage, language, extra_extensions
        )

    def build_project_created_statement(
        self,
        learner: Learner,
        project_id: str,
        title: str,
        theme: str,
        language: str,
        goals: list[str] | None = None,
    ) -> Statement:
        """プロジェクト作成ステートメントを生成

        最初の段階 (define) の "initialized" にタイトル・テーマ・目標を付与する。
        目標はJSON文字列として格納する。
        """
        return self.build_project_statement(
            learner,
            project_id,
            ProjectStage.first().value,
            language,
            extra_extensions={
                Extension.TITLE.value: title,
                Extension.THEME.value: theme,
                Extension.GOALS.value: json.dumps(goals or [], ensure_ascii=False),
            },
        )

    def build_stage_progression_statement(
        self,
        learner: Learner,
        project_id: str,
        stage: str,
        language: str,
    ) -> Statement:
        """段階遷移ステートメントを生成（動詞 "progressed"）"""
        return self._project_statement(VerbId.PROGRESSED, learner, project_id, stage, language)

    def _project_statement(
        self,
        verb_id: VerbId,
        learner: Learner,
        project_id: str,
        stage: str,
        language: str,
        extra_extensions: dict[str, Any] | None = None,
    ) -> Statement:
        extensions: dict[str, Any] = {
            Extension.STAGE.value: stage,
            Extension.LANGUAGE.value: language,
            Extension.PROJECT_ID.value: project_id,
        }
        if extra_extensions:
            extensions.update(extra_extensions)

        return self._statement(
            actor=self.create_actor(learner),
            verb=self._verb(verb_id),
            object_=Activity(
                id=self.project_activity_id(project_id),
                definition=ActivityDefinition(
                    type=ActivityType.LANGUAGE_PROJECT.value,
                    name={"en-US": f"Language Project - {stage}"},
                    extensions=extensions,
                ),
            ),
            context=self.create_context(learner.role, stage),
        )

    # ------------------------------------------------------------------
    # AIツール・プロンプト
    # ------------------------------------------------------------------

    def build_tool_usage_statement(
        self,
        learner: Learner,
        tool_name: str,
        purpose: str,
        project_id: str,
    ) -> Statement:
        """AIツール利用ステートメントを生成

        目的とプロジェクトIDはコンテキスト拡張に格納する。
        """
        context = self.create_context(learner.role)
        context = context.model_copy(
            update={
                "extensions": {
                    **context.extensions,
                    Extension.PURPOSE.value: purpose,
                    Extension.PROJECT_ID.value: project_id,
                }
            }
        )
        return self._statement(
            actor=self.create_actor(learner),
            verb=self._verb(VerbId.USED_AI_TOOL),
            object_=Activity(
                id=f"{self._activity_base}/ai-tool/{tool_name}",
                definition=ActivityDefinition(
                    type=ActivityType.AI_TOOL.value,
                    name={"en-US": tool_name},
                    description={"en-US": f"Used {tool_name} for {purpose}"},
                ),
            ),
            context=context,
        )

    def build_prompt_statement(
        self,
        learner: Learner,
        prompt_text: str,
        refinement_count: int,
        effectiveness_score: float,
    ) -> Statement:
        """プロンプト設計ステートメントを生成

        プロンプト本文はプレビューのみを説明に残す。切り詰める場合は
        省略記号を含めて PROMPT_PREVIEW_LENGTH 文字以内に収める。
        """
        preview = prompt_text
        if len(prompt_text) > PROMPT_PREVIEW_LENGTH:
            preview = prompt_text[: PROMPT_PREVIEW_LENGTH - len(PROMPT_ELLIPSIS)] + PROMPT_ELLIPSIS

        return self._statement(
            actor=self.create_actor(learner),
            verb=self._verb(VerbId.ENGINEERED_PROMPT),
            object_=Activity(
                id=f"{self._activity_base}/prompt/{generate_statement_id()}",
                definition=ActivityDefinition(
                    type=ActivityType.PROMPT_ENGINEERING.value,
                    description={"en-US": preview},
                ),
            ),
            result=Result(
                score=Score(
                    raw=effectiveness_score,
                    min=PROMPT_SCORE_MIN,
                    max=PROMPT_SCORE_MAX,
                ),
                extensions={
                    Extension.REFINEMENTS.value: refinement_count,
                    Extension.TECHNIQUE.value: DEFAULT_PROMPT_TECHNIQUE,
                },
            ),
        )

    # ------------------------------------------------------------------
    # 学習成果
    # ------------------------------------------------------------------

    def build_achievement_statement(
        self,
        learner: Learner,
        outcome_id: str,
        level: float,
        evidence_text: str,
    ) -> Statement:
        """学習成果達成ステートメントを生成

        Args:
            learner: 利用者
            outcome_id: 学習成果ID（未登録のIDも受け付け、名称はIDそのもの）
            level: 達成レベル (0-100)
            evidence_text: 達成の根拠

        Returns:
            生成されたステートメント
        """
        try:
            name = OUTCOME_DEFINITIONS[LearningOutcome(outcome_id)].name
        except ValueError:
            name = {"en-US": outcome_id}

        return self._statement(
            actor=self.create_actor(learner),
            verb=self._verb(VerbId.ACHIEVED),
            object_=Activity(
                id=self.outcome_activity_id(outcome_id),
                definition=ActivityDefinition(
                    type=ActivityType.LEARNING_OUTCOME.value,
                    name=dict(name),
                ),
            ),
            result=Result(
                score=Score(
                    raw=level,
                    scaled=level / ACHIEVEMENT_SCORE_MAX,
                    min=ACHIEVEMENT_SCORE_MIN,
                    max=ACHIEVEMENT_SCORE_MAX,
                ),
                extensions={Extension.EVIDENCE.value: evidence_text},
            ),
        )
