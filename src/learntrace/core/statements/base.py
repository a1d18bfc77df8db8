"""xAPI ステートメントモデル

イミュータブルなステートメント（学習イベント）の定義とシリアライズ。
型付きのコアフィールドと、ドメイン固有属性を運ぶ拡張マップで構成される。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

# ロケール → 表示文字列
LanguageMap = dict[str, str]


def generate_statement_id() -> str:
    """ステートメントIDを生成 (UUID v4)"""
    return str(uuid4())


@dataclass(frozen=True)
class ActorKey:
    """アクターの識別キー

    (account.name, account.homePage) の組が同じなら同一アクター。
    """

    name: str
    home_page: str

    def to_agent(self) -> dict[str, Any]:
        """xAPI Agent 形式の辞書に変換"""
        return {
            "objectType": "Agent",
            "account": {"name": self.name, "homePage": self.home_page},
        }

    def to_json(self) -> str:
        """クエリパラメータ用のコンパクトJSON"""
        return json.dumps(self.to_agent(), separators=(",", ":"), ensure_ascii=False)


class _XAPIModel(BaseModel):
    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }


class Account(_XAPIModel):
    """アクターのアカウント"""

    name: str = Field(..., min_length=1, description="安定したアカウント名")
    home_page: str = Field(..., alias="homePage", min_length=1, description="名前空間URI")


class Agent(_XAPIModel):
    """ステートメントの主体"""

    object_type: Literal["Agent"] = Field(default="Agent", alias="objectType")
    name: str | None = Field(default=None, description="表示名")
    account: Account

    @property
    def key(self) -> ActorKey:
        return ActorKey(name=self.account.name, home_page=self.account.home_page)


class Verb(_XAPIModel):
    """動詞"""

    id: str = Field(..., min_length=1, description="動詞URI")
    display: LanguageMap = Field(default_factory=dict)


class ActivityDefinition(_XAPIModel):
    """アクティビティ定義"""

    type: str | None = Field(default=None, description="アクティビティタイプURI")
    name: LanguageMap | None = None
    description: LanguageMap | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)


class Activity(_XAPIModel):
    """ステートメントの対象"""

    id: str = Field(..., min_length=1, description="アクティビティURI")
    object_type: Literal["Activity"] = Field(default="Activity", alias="objectType")
    definition: ActivityDefinition | None = None


class Score(_XAPIModel):
    """スコア"""

    raw: float | None = None
    min: float | None = None
    max: float | None = None
    scaled: float | None = None


class Result(_XAPIModel):
    """結果"""

    score: Score | None = None
    success: bool | None = None
    completion: bool | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)


class Context(_XAPIModel):
    """横断的メタデータ"""

    registration: str | None = None
    platform: str | None = None
    language: str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)


class Statement(_XAPIModel):
    """ステートメント（学習イベント）

    生成時にIDとタイムスタンプが付与され、以後変更されない。
    状態の変化は、より新しいタイムスタンプのステートメント追記でのみ表現する。
    """

    id: str = Field(default_factory=generate_statement_id, description="ステートメントID")
    actor: Agent
    verb: Verb
    object_: Activity = Field(..., alias="object")
    result: Result | None = None
    context: Context | None = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="イベント発生時刻 (UTC)",
    )
    stored: datetime | None = Field(default=None, description="LRS の格納時刻")

    @field_validator("timestamp", "stored")
    @classmethod
    def ensure_aware(cls, v: datetime | None) -> datetime | None:
        """タイムゾーンなしの時刻はUTCとみなす"""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def object_extension(self, key: str, default: Any = None) -> Any:
        """object.definition.extensions から値を取得"""
        definition = self.object_.definition
        if definition is None:
            return default
        return definition.extensions.get(key, default)

    def result_extension(self, key: str, default: Any = None) -> Any:
        """result.extensions から値を取得"""
        if self.result is None:
            return default
        return self.result.extensions.get(key, default)

    def context_extension(self, key: str, default: Any = None) -> Any:
        """context.extensions から値を取得"""
        if self.context is None:
            return default
        return self.context.extensions.get(key, default)

    def to_xapi(self) -> dict[str, Any]:
        """xAPI ワイヤ形式の辞書にシリアライズ"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """JSON文字列にシリアライズ"""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> Statement:
        """JSON文字列からデシリアライズ"""
        return parse_statement(json_str)


def parse_statement(data: dict[str, Any] | str) -> Statement:
    """ワイヤ形式のデータをステートメントに変換

    格納済みのステートメントとして読むため、id と timestamp は生成しない。
    timestamp がなければ stored を発生時刻として使う。

    Raises:
        ValidationError: JSONとして不正、または必須フィールドが欠落している場合
    """
    try:
        if isinstance(data, str):
            data = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"不正なステートメントです: {exc}") from exc

    if isinstance(data, dict):
        if not data.get("timestamp") and data.get("stored"):
            data = {**data, "timestamp": data["stored"]}
        missing = [key for key in ("id", "timestamp") if not data.get(key)]
        if missing:
            raise ValidationError(f"必須フィールドが欠落しています: {', '.join(missing)}")

    try:
        return Statement.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(f"不正なステートメントです: {exc}") from exc


def validate_statement(statement: Statement) -> Statement:
    """追記前の必須フィールド検証

    model_construct で組み立てられた未検証の値も対象にするため、
    属性を直接たどって検査する。

    Raises:
        ValidationError: actor / verb.id / object.id / object.definition.type /
            timestamp のいずれかが空の場合
    """
    missing: list[str] = []

    actor = getattr(statement, "actor", None)
    account = getattr(actor, "account", None)
    if not getattr(account, "name", None) or not getattr(account, "home_page", None):
        missing.append("actor")

    if not getattr(getattr(statement, "verb", None), "id", None):
        missing.append("verb.id")

    activity = getattr(statement, "object_", None)
    if not getattr(activity, "id", None):
        missing.append("object.id")
    if not getattr(getattr(activity, "definition", None), "type", None):
        missing.append("object.definition.type")

    if not isinstance(getattr(statement, "timestamp", None), datetime):
        missing.append("timestamp")

    if not getattr(statement, "id", None):
        missing.append("id")

    if missing:
        raise ValidationError(f"必須フィールドが欠落しています: {', '.join(missing)}")
    return statement
