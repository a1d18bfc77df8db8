"""LearnTrace CLI

コマンドラインインターフェース。
"""

import argparse
import asyncio
import logging
import sys

from .core.config import LearnTraceSettings, get_settings, reload_settings
from .core.errors import LRSClientError
from .core.lrs import LRSClient
from .core.projections import ProgressProjector, ProjectProjector
from .core.statements import ActorKey, StatementBuilder


def main(argv: list[str] | None = None) -> int:
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description="LearnTrace - 学習活動のイベント記録と状態投影",
        prog="learntrace",
    )
    parser.add_argument("--config", help="設定ファイルパス（learntrace.config.yaml）")

    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    # projects コマンド
    projects_parser = subparsers.add_parser("projects", help="プロジェクトの現在状態を表示")
    _add_actor_arguments(projects_parser)

    # progress コマンド
    progress_parser = subparsers.add_parser("progress", help="学習成果の進捗を表示")
    _add_actor_arguments(progress_parser)

    # get コマンド
    get_parser = subparsers.add_parser("get", help="ステートメントをIDで取得")
    get_parser.add_argument("statement_id", help="ステートメントID")

    # seed コマンド
    subparsers.add_parser("seed", help="サンプルステートメントを送信")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    settings = reload_settings(args.config) if args.config else get_settings()
    logging.basicConfig(
        level=settings.logging.level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    handlers = {
        "projects": run_projects,
        "progress": run_progress,
        "get": run_get,
        "seed": run_seed,
    }
    try:
        client = LRSClient(settings.lrs, vocabulary=settings.vocabulary)
        asyncio.run(handlers[args.command](args, settings, client))
    except LRSClientError as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1
    return 0


def _add_actor_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--account", required=True, help="アカウント名")
    parser.add_argument("--home-page", default=None, help="アカウントの名前空間URI")


def _actor_from_args(args: argparse.Namespace, settings: LearnTraceSettings) -> ActorKey:
    return ActorKey(name=args.account, home_page=args.home_page or settings.vocabulary.home_page)


async def run_projects(
    args: argparse.Namespace, settings: LearnTraceSettings, client: LRSClient
) -> None:
    """プロジェクトの現在状態を表示"""
    actor = _actor_from_args(args, settings)
    views = await ProjectProjector(client).project_projects_for(actor)

    if not views:
        print(f"{actor.name} のプロジェクトが見つかりません。")
        return

    print(f"\n=== {actor.name} のプロジェクト ({len(views)}件) ===")
    for view in views:
        updated = view.last_updated.isoformat() if view.last_updated else "-"
        print(f"  {view.id}: {view.title or '(無題)'}")
        print(f"    段階: {view.stage or '-'}  言語: {view.language or '-'}  更新: {updated}")


async def run_progress(
    args: argparse.Namespace, settings: LearnTraceSettings, client: LRSClient
) -> None:
    """学習成果の進捗を表示"""
    actor = _actor_from_args(args, settings)
    projector = ProgressProjector(
        client,
        builder=StatementBuilder(settings.vocabulary),
        max_concurrency=settings.projection.max_concurrent_queries,
    )
    progress = await projector.project_progress_for(actor)

    print(f"\n=== {actor.name} の学習成果 ===")
    for outcome_id, item in progress.items():
        achieved = item.timestamp.isoformat() if item.timestamp else "未達成"
        print(f"  {outcome_id}: {item.score:g} ({achieved})")


async def run_get(args: argparse.Namespace, settings: LearnTraceSettings, client: LRSClient) -> None:
    """ステートメントを表示"""
    statement = await client.get_statement(args.statement_id)
    print(statement.to_json())


async def run_seed(
    args: argparse.Namespace, settings: LearnTraceSettings, client: LRSClient
) -> None:
    """サンプルステートメントを送信"""
    ids = await client.send_sample_data()
    print(f"✓ サンプルステートメントを送信しました: {', '.join(ids)}")


if __name__ == "__main__":
    sys.exit(main())
