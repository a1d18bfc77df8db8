"""xAPI 語彙定義

動詞・アクティビティタイプ・拡張URI・学習成果（ILO）・プロジェクト段階を定義。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

ADL_VERB_BASE = "http://adlnet.gov/expapi/verbs/"
PLATFORM_BASE = "http://aiforl.edu/"
VERB_BASE = "http://aiforl.edu/verbs/"
ACTIVITY_TYPE_BASE = "http://aiforl.edu/activities/"
EXTENSION_BASE = "http://aiforl.edu/extensions/"


class VerbId(str, Enum):
    """動詞URI"""

    # ADL 標準動詞
    INITIALIZED = ADL_VERB_BASE + "initialized"
    PROGRESSED = ADL_VERB_BASE + "progressed"
    ACHIEVED = ADL_VERB_BASE + "achieved"

    # プロジェクトライフサイクル
    CREATED_PROJECT = VERB_BASE + "created-project"
    ADVANCED_STAGE = VERB_BASE + "advanced-stage"
    SUBMITTED_WORK = VERB_BASE + "submitted-work"

    # AIツール
    USED_AI_TOOL = VERB_BASE + "used-ai-tool"
    ENGINEERED_PROMPT = VERB_BASE + "engineered-prompt"
    REFINED_PROMPT = VERB_BASE + "refined-prompt"

    # 学習
    REFLECTED_ON = VERB_BASE + "reflected-on"
    COLLABORATED_WITH = VERB_BASE + "collaborated-with"
    ASSESSED_CRITICALLY = VERB_BASE + "assessed-critically"


# 動詞URI → ロケール別表示名
VERB_DISPLAY: dict[VerbId, dict[str, str]] = {
    VerbId.INITIALIZED: {"en-US": "initialized"},
    VerbId.PROGRESSED: {"en-US": "progressed to"},
    VerbId.ACHIEVED: {"en-US": "achieved"},
    VerbId.CREATED_PROJECT: {"en-US": "created project", "zh-CN": "创建项目"},
    VerbId.ADVANCED_STAGE: {"en-US": "advanced to stage", "zh-CN": "进入阶段"},
    VerbId.SUBMITTED_WORK: {"en-US": "submitted work", "zh-CN": "提交作品"},
    VerbId.USED_AI_TOOL: {"en-US": "used AI tool", "zh-CN": "使用AI工具"},
    VerbId.ENGINEERED_PROMPT: {"en-US": "engineered prompt", "zh-CN": "设计提示词"},
    VerbId.REFINED_PROMPT: {"en-US": "refined prompt", "zh-CN": "优化提示词"},
    VerbId.REFLECTED_ON: {"en-US": "reflected on", "zh-CN": "反思"},
    VerbId.COLLABORATED_WITH: {"en-US": "collaborated with", "zh-CN": "协作"},
    VerbId.ASSESSED_CRITICALLY: {"en-US": "critically assessed", "zh-CN": "批判性评估"},
}


class ActivityType(str, Enum):
    """アクティビティタイプURI"""

    APPLICATION = "http://adlnet.gov/expapi/activities/application"
    LANGUAGE_PROJECT = ACTIVITY_TYPE_BASE + "language-project"
    AI_TOOL = ACTIVITY_TYPE_BASE + "ai-tool"
    PROMPT_ENGINEERING = ACTIVITY_TYPE_BASE + "prompt-engineering"
    REFLECTION = ACTIVITY_TYPE_BASE + "reflection"
    PEER_REVIEW = ACTIVITY_TYPE_BASE + "peer-review"
    LEARNING_OUTCOME = ACTIVITY_TYPE_BASE + "learning-outcome"


class Extension(str, Enum):
    """拡張キーURI"""

    # プロジェクト
    PROJECT_ID = EXTENSION_BASE + "project-id"
    STAGE = EXTENSION_BASE + "stage"
    LANGUAGE = EXTENSION_BASE + "language"
    TITLE = EXTENSION_BASE + "title"
    THEME = EXTENSION_BASE + "theme"
    GOALS = EXTENSION_BASE + "goals"

    # AIツール・プロンプト
    PURPOSE = EXTENSION_BASE + "purpose"
    REFINEMENTS = EXTENSION_BASE + "refinements"
    TECHNIQUE = EXTENSION_BASE + "technique"

    # 学習成果
    EVIDENCE = EXTENSION_BASE + "evidence"

    # コンテキスト
    USER_ROLE = EXTENSION_BASE + "user-role"
    PROJECT_STAGE = EXTENSION_BASE + "project-stage"


class ProjectStage(str, Enum):
    """プロジェクト段階（CARフレームワーク）"""

    DEFINE = "define"
    COLLECT = "collect"
    CREATE = "create"
    PRESENT = "present"

    @classmethod
    def first(cls) -> ProjectStage:
        return cls.DEFINE

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in {s.value for s in cls}


class LearningOutcome(str, Enum):
    """学習成果（ILO）ID

    列挙順がそのまま進捗投影の出力順になる。
    """

    USE_EXPLAIN_EVALUATE = "use-explain-evaluate"
    APPLY_ETHICAL_GUIDELINES = "apply-ethical-guidelines"
    DESIGN_REFINE_PROMPTS = "design-refine-prompts"
    CRITICALLY_ASSESS_OUTPUT = "critically-assess-output"
    INTEGRATE_PERSONALIZED_LEARNING = "integrate-personalized-learning"


@dataclass(frozen=True)
class OutcomeDefinition:
    """学習成果のロケール別名称と説明"""

    name: dict[str, str] = field(default_factory=dict)
    description: dict[str, str] = field(default_factory=dict)


OUTCOME_DEFINITIONS: dict[LearningOutcome, OutcomeDefinition] = {
    LearningOutcome.USE_EXPLAIN_EVALUATE: OutcomeDefinition(
        name={
            "en-US": "Use, Explain and Evaluate AI Tools",
            "zh-CN": "使用、解释和评估AI工具",
        },
        description={
            "en-US": (
                "Use and describe AI tools for language production "
                "and assess their benefits and limitations"
            ),
            "zh-CN": "使用和描述用于语言生产的AI工具，并评估其优势和局限性",
        },
    ),
    LearningOutcome.APPLY_ETHICAL_GUIDELINES: OutcomeDefinition(
        name={
            "en-US": "Apply Ethical Guidelines",
            "zh-CN": "在AI使用中应用道德准则",
        },
        description={
            "en-US": (
                "Demonstrate responsible AI use through academic integrity and data protection"
            ),
            "zh-CN": "通过学术诚信和数据保护展示负责任的AI使用",
        },
    ),
    LearningOutcome.DESIGN_REFINE_PROMPTS: OutcomeDefinition(
        name={
            "en-US": "Design and Refine Prompts",
            "zh-CN": "设计和优化有效提示词",
        },
        description={
            "en-US": "Create and iteratively improve prompts for context-appropriate AI support",
            "zh-CN": "创建并迭代改进提示词以获得适合语境的AI支持",
        },
    ),
    LearningOutcome.CRITICALLY_ASSESS_OUTPUT: OutcomeDefinition(
        name={
            "en-US": "Critically Assess Output",
            "zh-CN": "批判性评估AI生成的输出",
        },
        description={
            "en-US": "Analyze AI content for linguistic accuracy and cultural appropriateness",
            "zh-CN": "分析AI内容的语言准确性和文化适当性",
        },
    ),
    LearningOutcome.INTEGRATE_PERSONALIZED_LEARNING: OutcomeDefinition(
        name={
            "en-US": "Integrate Personalized Learning",
            "zh-CN": "将AI整合到个性化学习中",
        },
        description={
            "en-US": "Support self-directed learning with goal setting and progress monitoring",
            "zh-CN": "通过目标设定和进度监控支持自主学习",
        },
    ),
}


UriKind = Literal["verb", "activity", "extension"]


def get_uri(kind: UriKind, key: str) -> str:
    """短縮キーを完全なURIに解決

    既知のキーは定義済みURIを返し、未知のキーは基底名前空間に連結する。

    Args:
        kind: "verb" / "activity" / "extension"
        key: 短縮キー（例: "used-ai-tool", "language-project", "project-id"）

    Returns:
        完全なURI

    Raises:
        ValueError: kind が不明な場合
    """
    if kind == "verb":
        for verb in VerbId:
            if verb.value.rsplit("/", 1)[-1] == key:
                return verb.value
        return VERB_BASE + key
    if kind == "activity":
        return ACTIVITY_TYPE_BASE + key
    if kind == "extension":
        return EXTENSION_BASE + key
    raise ValueError(f"未知のURI種別です: {kind}")


def verb_display(verb: VerbId) -> dict[str, str]:
    """動詞の表示名マップを取得"""
    return dict(VERB_DISPLAY.get(verb, {"en-US": verb.value.rsplit("/", 1)[-1]}))
