"""StatementBuilder のテスト"""

import json

import pytest

from learntrace.core.config import VocabularyConfig
from learntrace.core.errors import LearnTraceError, ValidationError
from learntrace.core.statements import (
    PROMPT_PREVIEW_LENGTH,
    ActivityType,
    Extension,
    Learner,
    ProjectStage,
    StatementBuilder,
    VerbId,
    generate_project_id,
    validate_statement,
)


def _all_statements(builder: StatementBuilder, learner: Learner):
    return [
        builder.build_project_statement(learner, "proj_1", "define", "es"),
        builder.build_project_created_statement(learner, "proj_1", "Title", "Travel", "es"),
        builder.build_stage_progression_statement(learner, "proj_1", "collect", "es"),
        builder.build_tool_usage_statement(learner, "chatgpt", "brainstorming", "proj_1"),
        builder.build_prompt_statement(learner, "Explain the subjunctive", 2, 7),
        builder.build_achievement_statement(learner, "apply-ethical-guidelines", 75, "essay"),
    ]


class TestRequiredFields:
    """全ビルダー出力の必須フィールド"""

    def test_every_statement_has_required_fields(self, builder, learner):
        """actor / verb.id / object.id / definition.type / timestamp が空でない"""
        for statement in _all_statements(builder, learner):
            assert statement.actor.account.name == learner.id
            assert statement.verb.id
            assert statement.object_.id
            assert statement.object_.definition is not None
            assert statement.object_.definition.type
            assert statement.timestamp is not None
            validate_statement(statement)

    def test_ids_are_unique_for_identical_arguments(self, builder, learner):
        """同じ引数でもIDは毎回異なる"""
        first = builder.build_project_statement(learner, "proj_1", "define", "es")
        second = builder.build_project_statement(learner, "proj_1", "define", "es")

        assert first.id != second.id
        assert first.context.registration != second.context.registration


class TestProjectStatements:
    """プロジェクト系ステートメント"""

    def test_project_statement(self, builder, learner):
        # Act
        statement = builder.build_project_statement(learner, "proj_1", "collect", "fr")

        # Assert
        assert statement.verb.id == VerbId.INITIALIZED.value
        assert statement.object_.id == "http://aiforl.edu/activities/project/proj_1"
        assert statement.object_.definition.type == ActivityType.LANGUAGE_PROJECT.value
        assert statement.object_.definition.name == {"en-US": "Language Project - collect"}
        assert statement.object_extension(Extension.STAGE.value) == "collect"
        assert statement.object_extension(Extension.LANGUAGE.value) == "fr"
        assert statement.object_extension(Extension.PROJECT_ID.value) == "proj_1"
        assert statement.context_extension(Extension.PROJECT_STAGE.value) == "collect"
        assert statement.context_extension(Extension.USER_ROLE.value) == "learner"

    def test_project_statement_is_initialized_for_later_stages(self, builder, learner):
        """段階に関わらず project statement の動詞は initialized"""
        statement = builder.build_project_statement(learner, "proj_1", "present", "fr")

        assert statement.verb.id == VerbId.INITIALIZED.value

    def test_stage_progression_uses_progressed(self, builder, learner):
        statement = builder.build_stage_progression_statement(learner, "proj_1", "create", "fr")

        assert statement.verb.id == VerbId.PROGRESSED.value
        assert statement.object_extension(Extension.STAGE.value) == "create"

    def test_project_created_carries_details(self, builder, learner):
        """作成時はタイトル・テーマ・目標を持つ define 段階"""
        statement = builder.build_project_created_statement(
            learner, "proj_1", "Mi viaje", "Travel", "es", goals=["speak", "write"]
        )

        assert statement.object_extension(Extension.STAGE.value) == ProjectStage.DEFINE.value
        assert statement.object_extension(Extension.TITLE.value) == "Mi viaje"
        assert statement.object_extension(Extension.THEME.value) == "Travel"
        assert json.loads(statement.object_extension(Extension.GOALS.value)) == ["speak", "write"]

    def test_generate_project_id(self):
        first = generate_project_id()
        second = generate_project_id()

        assert first.startswith("proj_")
        assert first != second


class TestToolAndPromptStatements:
    """AIツール・プロンプト系ステートメント"""

    def test_tool_usage_statement(self, builder, learner):
        statement = builder.build_tool_usage_statement(learner, "deepl", "translation", "proj_9")

        assert statement.verb.id == VerbId.USED_AI_TOOL.value
        assert statement.object_.id == "http://aiforl.edu/activities/ai-tool/deepl"
        assert statement.object_.definition.description == {
            "en-US": "Used deepl for translation"
        }
        assert statement.context_extension(Extension.PURPOSE.value) == "translation"
        assert statement.context_extension(Extension.PROJECT_ID.value) == "proj_9"
        assert statement.context_extension(Extension.USER_ROLE.value) == "learner"

    def test_prompt_statement_scores_and_refinements(self, builder, learner):
        statement = builder.build_prompt_statement(learner, "short prompt", 3, 8)

        assert statement.verb.id == VerbId.ENGINEERED_PROMPT.value
        assert statement.result.score.raw == 8
        assert statement.result.score.min == 0
        assert statement.result.score.max == 10
        assert statement.result_extension(Extension.REFINEMENTS.value) == 3
        assert statement.object_.definition.description == {"en-US": "short prompt"}

    def test_prompt_text_is_truncated(self, builder, learner):
        """プロンプト本文はプレビュー長で切り詰める"""
        prompt = "x" * (PROMPT_PREVIEW_LENGTH + 50)

        statement = builder.build_prompt_statement(learner, prompt, 0, 5)

        description = statement.object_.definition.description["en-US"]
        assert len(description) == PROMPT_PREVIEW_LENGTH
        assert description == "x" * (PROMPT_PREVIEW_LENGTH - 3) + "..."
        assert prompt not in statement.to_json()

    def test_prompt_at_preview_length_is_kept(self, builder, learner):
        """プレビュー長ちょうどの本文は切り詰めない"""
        prompt = "y" * PROMPT_PREVIEW_LENGTH

        statement = builder.build_prompt_statement(learner, prompt, 0, 5)

        assert statement.object_.definition.description == {"en-US": prompt}

    def test_prompt_object_ids_differ(self, builder, learner):
        first = builder.build_prompt_statement(learner, "p", 0, 5)
        second = builder.build_prompt_statement(learner, "p", 0, 5)

        assert first.object_.id != second.object_.id


class TestAchievementStatements:
    """学習成果達成ステートメント"""

    def test_achievement_statement(self, builder, learner):
        statement = builder.build_achievement_statement(
            learner, "apply-ethical-guidelines", 75, "evidence-x"
        )

        assert statement.verb.id == VerbId.ACHIEVED.value
        assert statement.object_.id == "http://aiforl.edu/activities/ilo/apply-ethical-guidelines"
        assert statement.object_.definition.name["en-US"] == "Apply Ethical Guidelines"
        assert statement.result.score.raw == 75
        assert statement.result.score.scaled == pytest.approx(0.75)
        assert statement.result.score.max == 100
        assert statement.result_extension(Extension.EVIDENCE.value) == "evidence-x"

    def test_unknown_outcome_uses_id_as_name(self, builder, learner):
        """未登録の学習成果IDでも構築できる"""
        statement = builder.build_achievement_statement(learner, "custom-outcome", 10, "e")

        assert statement.object_.definition.name == {"en-US": "custom-outcome"}

    def test_custom_activity_base(self, learner):
        builder = StatementBuilder(VocabularyConfig(activity_base="http://school.example/act/"))

        statement = builder.build_achievement_statement(learner, "x", 1, "e")

        assert statement.object_.id == "http://school.example/act/ilo/x"


class TestBuilderValidation:
    """構築時の検証エラー"""

    @pytest.mark.parametrize(
        "build",
        [
            lambda b, who: b.build_project_statement(who, "p1", "define", "es"),
            lambda b, who: b.build_tool_usage_statement(who, "chatgpt", "brainstorming", "p1"),
            lambda b, who: b.build_prompt_statement(who, "p", 1, 5),
            lambda b, who: b.build_achievement_statement(who, "apply-ethical-guidelines", 75, "e"),
        ],
    )
    def test_empty_account_raises_learntrace_validation_error(self, builder, build):
        """アカウント名が空なら ValidationError（LearnTraceError の一種）"""
        # Arrange
        learner = Learner(id="", name="Nameless")

        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            build(builder, learner)
        assert isinstance(exc_info.value, LearnTraceError)

    def test_empty_home_page_raises_validation_error(self, learner):
        builder = StatementBuilder(VocabularyConfig(home_page=""))

        with pytest.raises(ValidationError):
            builder.build_project_statement(learner, "p1", "define", "es")
