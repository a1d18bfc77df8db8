"""LearnTrace 設定管理モジュール

Pydantic Settingsを使用した型安全な設定管理。
learntrace.config.yaml と環境変数から設定を読み込む。
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LRSConfig(BaseModel):
    """LRS (Learning Record Store) 接続設定

    認証情報そのものは設定ファイルに書かず、auth_env で指定した環境変数から読む。
    """

    endpoint: str = Field(default="http://localhost:8080/xapi", description="LRSエンドポイントURL")
    auth_env: str = Field(default="LRS_AUTH", description="認証情報の環境変数名")
    auth_scheme: Literal["Basic", "Bearer"] = Field(default="Basic")
    version: str = Field(default="1.0.3", description="X-Experience-API-Version")
    timeout_seconds: float = Field(default=30.0, gt=0, description="呼び出しごとの期限秒")


class VocabularyConfig(BaseModel):
    """ステートメント生成時の語彙設定"""

    activity_base: str = Field(default="http://aiforl.edu/activities")
    home_page: str = Field(default="http://aiforl.edu", description="アクターの名前空間URI")
    platform: str = Field(default="AI-Assisted Language Learning Platform")
    language: str = Field(default="en-US")


class ProjectionConfig(BaseModel):
    """投影設定"""

    max_concurrent_queries: int = Field(
        default=5, ge=1, le=50, description="学習成果クエリの最大同時実行数"
    )


class LoggingConfig(BaseModel):
    """ロギング設定"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class LearnTraceSettings(BaseSettings):
    """LearnTrace全体設定

    設定の優先順位:
    1. learntrace.config.yaml（from_yaml で読み込んだ値）
    2. 環境変数 (LEARNTRACE_LRS__ENDPOINT 等)
    3. デフォルト値
    """

    model_config = SettingsConfigDict(
        env_prefix="LEARNTRACE_",
        env_nested_delimiter="__",
    )

    lrs: LRSConfig = Field(default_factory=LRSConfig)
    vocabulary: VocabularyConfig = Field(default_factory=VocabularyConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path | str | None = None) -> "LearnTraceSettings":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス。Noneの場合はデフォルトパスを探索

        Returns:
            LearnTraceSettings インスタンス
        """
        if config_path is None:
            search_paths = [
                Path.cwd() / "learntrace.config.yaml",
                Path.cwd() / "learntrace.config.yml",
                Path.home() / ".learntrace" / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path and Path(config_path).exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
            return cls.model_validate(yaml_config)

        return cls()


# 設定のキャッシュ（遅延初期化）。LRSクライアントはここから明示的に組み立てる
_settings: LearnTraceSettings | None = None


def get_settings() -> LearnTraceSettings:
    """設定を取得"""
    global _settings
    if _settings is None:
        _settings = LearnTraceSettings.from_yaml()
    return _settings


def reload_settings(config_path: Path | str | None = None) -> LearnTraceSettings:
    """設定を再読み込み"""
    global _settings
    _settings = LearnTraceSettings.from_yaml(config_path)
    return _settings
