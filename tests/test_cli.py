"""Tests for the command-line entry point (apigen.cli).

Covers:
- Answer collection from flags, answers files and the environment
- Successful generation and the summary output
- Exit status 1 on invalid answers, unknown strict providers and missing templates
- The update notifier stopping generation
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from apigen.cli import build_parser, collect_answers, load_config, main, run
from apigen.updates import UpdateInfo

pytestmark = pytest.mark.unit

FOO_FLAGS = [
    "--name", "FooApi",
    "--kestrel-port", "6002",
    "--iis-port", "6001",
    "--iis-https-port", "44362",
]


class TestParser:
    def test_flags_to_answers(self):
        args = build_parser().parse_args([*FOO_FLAGS, "--provider", "ms", "--keep"])
        answers = collect_answers(args)
        assert answers.project_name == "FooApi"
        assert answers.data_provider == "ms"
        assert answers.delete_content is False

    def test_delete_and_keep_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([*FOO_FLAGS, "--delete", "--keep"])

    def test_answers_file_with_flag_override(self, tmp_path: Path):
        path = tmp_path / "answers.json"
        path.write_text(json.dumps({
            "projectName": "FileApi",
            "kestrelHttpPort": "6002",
            "iisHttpPort": "6001",
            "iisHttpsPort": "44362",
            "dataProvider": "n",
        }), encoding="utf-8")
        args = build_parser().parse_args(["--answers", str(path), "--name", "FlagApi"])
        answers = collect_answers(args)
        assert answers.project_name == "FlagApi"
        assert answers.data_provider == "n"

    def test_load_config_flags(self, tmp_path: Path):
        args = build_parser().parse_args(["-o", str(tmp_path), "--no-update-check", "-v"])
        config = load_config(args)
        assert config.output_dir == tmp_path
        assert config.check_updates is False
        assert config.verbose is True

    def test_load_config_file(self, tmp_path: Path):
        path = tmp_path / "apigen.json"
        path.write_text(json.dumps({"output_dir": str(tmp_path / "from-file"), "verbose": True}))
        args = build_parser().parse_args(["--config", str(path), "--no-update-check"])
        config = load_config(args)
        assert config.output_dir == tmp_path / "from-file"
        assert config.verbose is True
        assert config.check_updates is False


class TestMain:
    def test_generates_project(self, output_dir: Path, capsys):
        main([*FOO_FLAGS, "-o", str(output_dir), "--no-update-check"])
        assert (output_dir / "src" / "FooApi" / "FooApi.csproj").is_file()
        out = capsys.readouterr().out
        assert "Generation summary" in out
        assert "postgres" in out

    def test_invalid_port(self, output_dir: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--name", "FooApi", "--kestrel-port", "x", "--iis-port", "1",
                  "--iis-https-port", "2", "-o", str(output_dir), "--no-update-check"])
        assert exc_info.value.code == 1
        assert "Invalid input" in capsys.readouterr().out

    def test_missing_answers_file(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--answers", str(tmp_path / "missing.json"), "--no-update-check"])
        assert exc_info.value.code == 1

    def test_strict_unknown_provider(self, output_dir: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([*FOO_FLAGS, "--provider", "mo", "--strict-provider",
                  "-o", str(output_dir), "--no-update-check"])
        assert exc_info.value.code == 1
        assert "Unknown data provider" in capsys.readouterr().out
        assert list(output_dir.iterdir()) == []

    def test_lenient_unknown_provider(self, output_dir: Path, capsys):
        main([*FOO_FLAGS, "--provider", "mo", "-o", str(output_dir), "--no-update-check"])
        assert "generating without data access" in capsys.readouterr().out
        assert not (output_dir / "src" / "FooApi" / "DataAccess" / "EntityContext.cs").exists()

    def test_missing_template(self, tmp_path: Path, output_dir: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([*FOO_FLAGS, "--template", str(tmp_path / "nope"),
                  "-o", str(output_dir), "--no-update-check"])
        assert exc_info.value.code == 1
        assert "Template directory not found" in capsys.readouterr().out


class TestRun:
    async def test_update_available_stops(self, generator_config, answers, output_dir):
        config = generator_config.model_copy(update={"check_updates": True})
        info = UpdateInfo(current="1.4.0", latest="2.0.0")
        with patch("apigen.cli.check_for_update", AsyncMock(return_value=info)):
            status = await run(config, answers)
        assert status == 1
        assert list(output_dir.iterdir()) == []

    async def test_no_update_generates(self, generator_config, answers, output_dir):
        config = generator_config.model_copy(update={"check_updates": True})
        info = UpdateInfo(current="1.4.0", latest=None)
        with patch("apigen.cli.check_for_update", AsyncMock(return_value=info)):
            status = await run(config, answers)
        assert status == 0
        assert (output_dir / "FooApi.sln").is_file()

    async def test_check_skipped_when_disabled(self, generator_config, answers):
        mock_check = AsyncMock()
        with patch("apigen.cli.check_for_update", mock_check):
            assert await run(generator_config, answers) == 0
        mock_check.assert_not_called()
