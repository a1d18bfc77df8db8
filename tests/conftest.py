"""LearnTrace テスト設定"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import httpx
import pytest

from learntrace.core import config as config_module
from learntrace.core.config import LRSConfig
from learntrace.core.lrs import LRSClient
from learntrace.core.statements import Learner, StatementBuilder

LRS_ENDPOINT = "http://lrs.test/xapi"


class FakeLRS:
    """インメモリの LRS

    httpx.MockTransport のハンドラとして xAPI statements リソースを模倣する。

    Attributes:
        statements: 格納済みステートメント (ID → ワイヤ形式)
        requests: 受信したリクエスト
        reject_index: 一括追記でこの位置のステートメントを不正として拒否する
        page_size: クエリ結果のページサイズ（None でページングなし）
    """

    def __init__(self, page_size: int | None = None) -> None:
        self.statements: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.reject_index: int | None = None
        self.page_size = page_size
        self._pages: dict[str, list[dict[str, Any]]] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return self._append(json.loads(request.content))

        params = request.url.params
        if "more" in params:
            remaining = self._pages.pop(params["more"], [])
            return self._page(remaining)
        if "statementId" in params:
            found = self.statements.get(params["statementId"])
            if found is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=found)

        matches = [s for s in self.statements.values() if self._matches(s, params)]
        return self._page(matches)

    def _append(self, body: Any) -> httpx.Response:
        items = body if isinstance(body, list) else [body]
        if self.reject_index is not None and self.reject_index < len(items):
            return httpx.Response(
                400, json={"message": f"statement {self.reject_index} failed validation"}
            )
        ids = []
        for item in items:
            statement_id = item.get("id") or str(uuid4())
            self.statements[statement_id] = {
                **item,
                "id": statement_id,
                "stored": datetime.now(UTC).isoformat(),
            }
            ids.append(statement_id)
        return httpx.Response(200, json=ids)

    def _page(self, matches: list[dict[str, Any]]) -> httpx.Response:
        if self.page_size is not None and len(matches) > self.page_size:
            token = uuid4().hex
            self._pages[token] = matches[self.page_size :]
            return httpx.Response(
                200,
                json={
                    "statements": matches[: self.page_size],
                    "more": f"/xapi/statements?more={token}",
                },
            )
        return httpx.Response(200, json={"statements": matches, "more": ""})

    @staticmethod
    def _matches(statement: dict[str, Any], params: httpx.QueryParams) -> bool:
        if "agent" in params:
            agent = json.loads(params["agent"])
            if statement["actor"].get("account") != agent.get("account"):
                return False
        if "verb" in params and statement["verb"]["id"] != params["verb"]:
            return False
        if "activity" in params and statement["object"]["id"] != params["activity"]:
            return False
        return True


@pytest.fixture(autouse=True)
def reset_settings():
    """設定キャッシュをテストごとにリセット"""
    config_module._settings = None
    yield
    config_module._settings = None


@pytest.fixture
def lrs_config() -> LRSConfig:
    """テスト用 LRSConfig"""
    return LRSConfig(endpoint=LRS_ENDPOINT, timeout_seconds=5.0)


@pytest.fixture
def fake_lrs() -> FakeLRS:
    return FakeLRS()


@pytest.fixture
def lrs_client(lrs_config: LRSConfig, fake_lrs: FakeLRS) -> LRSClient:
    """FakeLRS に接続した LRSClient"""
    return LRSClient(lrs_config, credential="dGVzdDpzZWNyZXQ=", transport=fake_lrs.transport)


@pytest.fixture
def builder() -> StatementBuilder:
    return StatementBuilder()


@pytest.fixture
def learner() -> Learner:
    return Learner(id="learner-001", name="Test Learner", role="learner")


@pytest.fixture
def paged_lrs() -> FakeLRS:
    """2件ずつページングする FakeLRS"""
    return FakeLRS(page_size=2)


@pytest.fixture
def make_client(lrs_config: LRSConfig):
    """任意のハンドラで応答する LRSClient を生成するファクトリ"""

    def _make(handler, config: LRSConfig | None = None) -> LRSClient:
        return LRSClient(
            config or lrs_config,
            credential="secret",
            transport=httpx.MockTransport(handler),
        )

    return _make
