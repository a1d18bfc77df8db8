"""CLIモジュールのテスト"""

import json
from unittest.mock import patch

import pytest

from learntrace.cli import main
from learntrace.core.lrs import LRSClient


@pytest.fixture
def config_file(tmp_path):
    """テスト用LRSを指す設定ファイル"""
    path = tmp_path / "learntrace.config.yaml"
    path.write_text("lrs:\n  endpoint: http://lrs.test/xapi\nlogging:\n  level: WARNING\n")
    return path


@pytest.fixture
def patched_client(fake_lrs):
    """CLIが生成する LRSClient を FakeLRS に接続する"""

    def _factory(config, **kwargs):
        return LRSClient(config, credential="x", transport=fake_lrs.transport, **kwargs)

    with patch("learntrace.cli.LRSClient", side_effect=_factory) as mock_client:
        yield mock_client


def _store(fake_lrs, *statements):
    for statement in statements:
        fake_lrs.statements[statement.id] = statement.to_xapi()


class TestMainFunction:
    """main関数のテスト"""

    def test_no_command_shows_help(self, capsys):
        """コマンドなしでヘルプが表示される"""
        # Act
        code = main([])

        # Assert
        assert code == 1
        assert "learntrace" in capsys.readouterr().out

    def test_account_is_required(self):
        with pytest.raises(SystemExit):
            main(["projects"])

    def test_missing_credential_is_reported(self, config_file, monkeypatch, capsys):
        """認証情報がなければエラーを表示して終了コード1"""
        monkeypatch.delenv("LRS_AUTH", raising=False)

        code = main(["--config", str(config_file), "seed"])

        assert code == 1
        assert "エラー" in capsys.readouterr().err


class TestCommands:
    """各コマンドのテスト"""

    def test_projects_command(
        self, config_file, patched_client, fake_lrs, builder, learner, capsys
    ):
        """projectsコマンドでプロジェクトの現在状態を表示する"""
        # Arrange
        created = builder.build_project_created_statement(
            learner, "proj_1", "Mi viaje", "Travel", "es"
        )
        _store(fake_lrs, created)

        # Act
        code = main(["--config", str(config_file), "projects", "--account", learner.id])

        # Assert
        out = capsys.readouterr().out
        assert code == 0
        assert "proj_1: Mi viaje" in out
        assert "段階: define" in out
        patched_client.assert_called_once()

    def test_projects_command_without_projects(self, config_file, patched_client, capsys):
        code = main(["--config", str(config_file), "projects", "--account", "nobody"])

        assert code == 0
        assert "見つかりません" in capsys.readouterr().out

    def test_progress_command(
        self, config_file, patched_client, fake_lrs, builder, learner, capsys
    ):
        """progressコマンドで全学習成果の進捗を表示する"""
        _store(
            fake_lrs,
            builder.build_achievement_statement(learner, "apply-ethical-guidelines", 75, "e"),
        )

        code = main(["--config", str(config_file), "progress", "--account", learner.id])

        out = capsys.readouterr().out
        assert code == 0
        assert "apply-ethical-guidelines: 75" in out
        assert "use-explain-evaluate: 0 (未達成)" in out

    def test_get_command(self, config_file, patched_client, fake_lrs, builder, learner, capsys):
        statement = builder.build_prompt_statement(learner, "Explain ser vs estar", 1, 6)
        _store(fake_lrs, statement)

        code = main(["--config", str(config_file), "get", statement.id])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["id"] == statement.id

    def test_get_command_not_found(self, config_file, patched_client, capsys):
        """存在しないIDはエラーを表示して終了コード1"""
        code = main(["--config", str(config_file), "get", "missing-id"])

        assert code == 1
        assert "エラー" in capsys.readouterr().err

    def test_seed_command(self, config_file, patched_client, fake_lrs, capsys):
        code = main(["--config", str(config_file), "seed"])

        assert code == 0
        assert len(fake_lrs.statements) == 1
        assert "サンプルステートメントを送信しました" in capsys.readouterr().out

    def test_seed_uses_configured_home_page(self, tmp_path, patched_client, fake_lrs, capsys):
        """デモアクターは設定した名前空間で記録される"""
        # Arrange
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "lrs:\n  endpoint: http://lrs.test/xapi\n"
            "vocabulary:\n  home_page: https://school.example\n"
        )

        # Act
        main(["--config", str(config_file), "seed"])
        stored = next(iter(fake_lrs.statements.values()))

        # Assert
        assert stored["actor"]["account"]["homePage"] == "https://school.example"
        assert patched_client.call_args.kwargs["vocabulary"].home_page == "https://school.example"
