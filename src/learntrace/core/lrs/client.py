"""LRS (Learning Record Store) クライアント

httpx ベースの非同期クライアント。
xAPI の statements リソースに対する追記・クエリ・ID取得を提供する。
リトライは行わない（再試行するかどうかは呼び出し側が決める）。
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from ..config import LRSConfig, VocabularyConfig
from ..errors import (
    LRSClientError,
    NotFoundError,
    RejectedError,
    TransportError,
    ValidationError,
)
from ..statements import (
    Account,
    Activity,
    ActivityDefinition,
    ActivityType,
    ActorKey,
    Agent,
    Statement,
    Verb,
    VerbId,
    parse_statement,
    validate_statement,
    verb_display,
)
from .query import StatementQuery, StatementResult

logger = logging.getLogger(__name__)

STATEMENTS_PATH = "/statements"

# LRS がステートメントそのものを拒否したとみなすステータス
_REJECTION_STATUS_CODES = {400, 409, 413}


class LRSClient:
    """LRS クライアント

    呼び出しごとに httpx.AsyncClient を開くステートレスな実装。
    ローカルキャッシュは持たず、全クエリがLRSに到達する。

    Args:
        config: LRSConfig インスタンス
        credential: 認証情報（省略時は config.auth_env の環境変数から取得）
        transport: httpx トランスポート（テストでのモック差し替え用）
        vocabulary: 語彙設定（サンプルデータのアクターとプロジェクトURIに使う）

    Raises:
        LRSClientError: 認証情報が見つからない場合
    """

    def __init__(
        self,
        config: LRSConfig,
        credential: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        vocabulary: VocabularyConfig | None = None,
    ) -> None:
        self._config = config
        self._vocabulary = vocabulary or VocabularyConfig()
        self._endpoint = config.endpoint.rstrip("/")
        self._transport = transport

        if credential is None:
            credential = os.environ.get(config.auth_env, "")
        if not credential:
            raise LRSClientError(
                f"LRS credential not found in environment variable '{config.auth_env}'. "
                f"Set {config.auth_env} to the LRS key/secret credential."
            )
        self._credential = credential

    # ------------------------------------------------------------------
    # プロパティ
    # ------------------------------------------------------------------

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def version(self) -> str:
        return self._config.version

    # ------------------------------------------------------------------
    # 追記
    # ------------------------------------------------------------------

    async def send_statement(
        self,
        statement: Statement | dict[str, Any],
        timeout: float | None = None,
    ) -> str:
        """ステートメントを1件追記する

        Args:
            statement: 追記するステートメント（ワイヤ形式の辞書も可）
            timeout: 期限秒（None で設定値）

        Returns:
            LRS が割り当てたステートメントID

        Raises:
            ValidationError: 必須フィールドが欠落している場合（送信しない）
            RejectedError: LRS がステートメントを拒否した場合
            TransportError: 通信・認証失敗、または期限切れの場合
        """
        prepared = self._prepare(statement)
        async with self._deadline(timeout, "send_statement"):
            data = await self._request("POST", STATEMENTS_PATH, json=prepared.to_xapi())
        statement_id = self._expect_ids(data, 1)[0]
        logger.debug("Statement %s appended to LRS", statement_id)
        return statement_id

    async def send_statements(
        self,
        statements: Sequence[Statement | dict[str, Any]],
        timeout: float | None = None,
    ) -> list[str]:
        """ステートメントを一括追記する

        全件が永続化されたと報告されるか、呼び出し全体が失敗するかのどちらか。
        失敗時にLRS側で一部が格納されている可能性は呼び出し側に露出しないため、
        再送前に再クエリすること。

        Args:
            statements: 追記するステートメント
            timeout: 期限秒（None で設定値）

        Returns:
            入力順に対応する割り当てIDのリスト（空入力なら通信せず空リスト）

        Raises:
            ValidationError: いずれかの必須フィールドが欠落している場合（送信しない）
            RejectedError: LRS がいずれかのステートメントを拒否した場合
            TransportError: 通信失敗、期限切れ、またはID件数が一致しない場合
        """
        prepared = [self._prepare(s) for s in statements]
        if not prepared:
            return []

        async with self._deadline(timeout, "send_statements"):
            data = await self._request(
                "POST", STATEMENTS_PATH, json=[s.to_xapi() for s in prepared]
            )
        ids = self._expect_ids(data, len(prepared))
        logger.debug("%d statements appended to LRS", len(ids))
        return ids

    async def send_sample_data(self, timeout: float | None = None) -> list[str]:
        """動作確認用のサンプルステートメントを追記する"""
        vocabulary = self._vocabulary
        sample = Statement(
            actor=Agent(
                name="Demo Learner",
                account=Account(name="demo_learner", home_page=vocabulary.home_page),
            ),
            verb=Verb(id=VerbId.INITIALIZED.value, display=verb_display(VerbId.INITIALIZED)),
            object_=Activity(
                id=f"{vocabulary.home_page.rstrip('/')}/platform",
                definition=ActivityDefinition(
                    type=ActivityType.APPLICATION.value,
                    name={"en-US": vocabulary.platform},
                ),
            ),
        )
        return await self.send_statements([sample], timeout=timeout)

    # ------------------------------------------------------------------
    # クエリ
    # ------------------------------------------------------------------

    async def query_statements(
        self,
        query: StatementQuery | None = None,
        timeout: float | None = None,
    ) -> StatementResult:
        """ステートメントをクエリする（1ページ分）

        一致なしは空の結果であり、エラーではない。

        Raises:
            TransportError: 通信失敗・期限切れ・応答形式不正の場合
        """
        query = query or StatementQuery()
        async with self._deadline(timeout, "query_statements"):
            return await self._query_page(query)

    async def query_more(self, more: str, timeout: float | None = None) -> StatementResult:
        """継続URLで次のページを取得する"""
        async with self._deadline(timeout, "query_more"):
            return await self._more_page(more)

    async def query_all(
        self,
        query: StatementQuery | None = None,
        timeout: float | None = None,
    ) -> list[Statement]:
        """継続URLをたどって全ページのステートメントを取得する

        期限はページ全体の取得に対して適用される。

        Raises:
            TransportError: いずれかのページ取得に失敗した場合、
                または継続URLが循環した場合
        """
        query = query or StatementQuery()
        statements: list[Statement] = []
        seen: set[str] = set()

        async with self._deadline(timeout, "query_all"):
            page = await self._query_page(query)
            statements.extend(page.statements)
            while page.more:
                if page.more in seen:
                    raise TransportError(f"LRS returned a repeating continuation: {page.more}")
                seen.add(page.more)
                page = await self._more_page(page.more)
                statements.extend(page.statements)

        return statements

    async def get_statement(self, statement_id: str, timeout: float | None = None) -> Statement:
        """IDを指定してステートメントを1件取得する

        Raises:
            NotFoundError: 該当するステートメントがない場合
            TransportError: 通信失敗・期限切れの場合
        """
        async with self._deadline(timeout, "get_statement"):
            data = await self._request(
                "GET",
                STATEMENTS_PATH,
                params={"statementId": statement_id},
                lookup=True,
            )

        # 一部のLRSはIDクエリにも StatementResult 形式で応答する
        if isinstance(data, dict) and "statements" in data:
            found = data.get("statements") or []
            if not found:
                raise NotFoundError(f"Statement {statement_id} not found", status_code=404)
            data = found[0]

        return self._parse(data)

    # ------------------------------------------------------------------
    # 定型クエリ
    # ------------------------------------------------------------------

    async def get_actor_statements(
        self,
        actor: ActorKey,
        timeout: float | None = None,
        **filters: Any,
    ) -> StatementResult:
        """アクターのステートメントをクエリする"""
        return await self.query_statements(StatementQuery(agent=actor, **filters), timeout)

    async def get_activity_statements(
        self,
        activity_id: str,
        timeout: float | None = None,
        **filters: Any,
    ) -> StatementResult:
        """アクティビティ（関連アクティビティを含む）のステートメントをクエリする"""
        filters.setdefault("related_activities", True)
        return await self.query_statements(
            StatementQuery(activity=activity_id, **filters), timeout
        )

    async def get_project_statements(
        self,
        project_id: str,
        actor: ActorKey | None = None,
        activity_base: str | None = None,
        timeout: float | None = None,
    ) -> StatementResult:
        """プロジェクトのステートメントをクエリする"""
        base = (activity_base or self._vocabulary.activity_base).rstrip("/")
        query = StatementQuery(
            activity=f"{base}/project/{project_id}",
            related_activities=True,
            agent=actor,
        )
        return await self.query_statements(query, timeout)

    # ------------------------------------------------------------------
    # 内部ヘルパー
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        """共通リクエストヘッダー"""
        return {
            "Authorization": f"{self._config.auth_scheme} {self._credential}",
            "X-Experience-API-Version": self._config.version,
            "Content-Type": "application/json",
        }

    @asynccontextmanager
    async def _deadline(self, timeout: float | None, operation: str) -> AsyncIterator[None]:
        """期限付き実行。期限切れは TransportError に変換する"""
        seconds = self._config.timeout_seconds if timeout is None else timeout
        try:
            async with asyncio.timeout(seconds):
                yield
        except TimeoutError as exc:
            logger.warning("LRS %s exceeded deadline of %.1fs", operation, seconds)
            raise TransportError(f"{operation} exceeded deadline of {seconds}s") from exc

    @staticmethod
    def _prepare(statement: Statement | dict[str, Any]) -> Statement:
        if isinstance(statement, dict):
            statement = parse_statement(statement)
        return validate_statement(statement)

    async def _query_page(self, query: StatementQuery) -> StatementResult:
        data = await self._request("GET", STATEMENTS_PATH, params=query.to_params())
        return self._parse_result(data)

    async def _more_page(self, more: str) -> StatementResult:
        url = str(httpx.URL(self._endpoint).join(more))
        data = await self._request("GET", url)
        return self._parse_result(data)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        lookup: bool = False,
    ) -> Any:
        """リクエストを送信し、JSON応答を返す"""
        try:
            async with httpx.AsyncClient(
                base_url=self._endpoint,
                headers=self._headers(),
                transport=self._transport,
                timeout=self._config.timeout_seconds,
            ) as client:
                response = await client.request(method, url, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("LRS %s %s failed: %s", method, url, exc)
            raise TransportError(f"LRS {method} {url} failed: {exc}") from exc

        self._raise_for_status(response, method, url, lookup)

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"LRS {method} {url} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        method: str,
        url: str,
        lookup: bool,
    ) -> None:
        status = response.status_code
        if response.is_success:
            return

        detail = response.text[:500]
        logger.warning("LRS %s %s returned %d: %s", method, url, status, detail)

        if lookup and status == 404:
            raise NotFoundError(f"Statement not found ({status})", status_code=status)
        if status in _REJECTION_STATUS_CODES:
            raise RejectedError(f"LRS rejected the statement(s): {detail}", status_code=status)
        raise TransportError(f"LRS {method} {url} returned {status}: {detail}", status_code=status)

    @staticmethod
    def _expect_ids(data: Any, expected: int) -> list[str]:
        """追記応答のIDリストを検証する"""
        if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
            raise TransportError(f"Unexpected append response from LRS: {data!r}")
        if len(data) != expected:
            raise TransportError(
                f"LRS acknowledged {len(data)} of {expected} statements; "
                "re-query before retrying"
            )
        return data

    @staticmethod
    def _parse(data: Any) -> Statement:
        try:
            return parse_statement(data)
        except ValidationError as exc:
            raise TransportError(f"LRS returned an unreadable statement: {exc}") from exc

    def _parse_result(self, data: Any) -> StatementResult:
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected query response from LRS: {data!r}")
        raw_statements = data.get("statements") or []
        return StatementResult(
            statements=[self._parse(s) for s in raw_statements],
            more=data.get("more") or None,
        )
