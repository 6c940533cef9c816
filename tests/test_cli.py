"""Tests for the dreamdup CLI."""

import json

import pytest
import yaml
from click.testing import CliRunner

from dreamdup.cli.formatters import OutputFormatter
from dreamdup.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def corpus_file(tmp_path):
    """Exported corpus of dream keywords."""
    path = tmp_path / "dreams.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "keyword": "뱀꿈", "slug": "snake-dream"},
                {"id": 2, "keyword": "호랑이꿈", "slug": "tiger-dream"},
                {"id": 3, "keyword": "돼지 꿈", "slug": "pig-dream"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


class TestCheckCommand:
    """Test `dreamdup check`."""

    def test_duplicates_exit_code(self, runner, corpus_file):
        """Similar keywords are listed and the exit code is 2."""
        result = runner.invoke(main, ["check", "돼지-꿈", "--corpus", str(corpus_file)])
        assert result.exit_code == 2
        assert "pig-dream" in result.output
        assert "100%" in result.output

    def test_no_duplicates(self, runner, corpus_file):
        """A fresh keyword exits 0."""
        result = runner.invoke(main, ["check", "용꿈", "--corpus", str(corpus_file)])
        assert result.exit_code == 0
        assert "No similar keywords" in result.output

    def test_json_output_with_exclude(self, runner, corpus_file):
        """JSON output honors --exclude-id."""
        result = runner.invoke(
            main,
            ["check", "뱀꿈", "--corpus", str(corpus_file), "--exclude-id", "1", "--format", "json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["checked"] is True
        assert data["matches"] == []
        assert data["corpus_size"] == 3

    def test_yaml_output(self, runner, corpus_file):
        """YAML output lists matches."""
        result = runner.invoke(
            main, ["check", "뱀 꿈", "--corpus", str(corpus_file), "--format", "yaml"]
        )
        assert result.exit_code == 2
        data = yaml.safe_load(result.output)
        assert data["matches"][0]["id"] == 1
        assert data["matches"][0]["similarity"] == 100

    def test_threshold_option(self, runner, corpus_file):
        """A lower threshold reports looser matches."""
        result = runner.invoke(
            main,
            ["check", "구렁이꿈", "--corpus", str(corpus_file), "-t", "0.5", "-f", "json"],
        )
        assert result.exit_code == 2
        data = json.loads(result.output)
        assert [m["id"] for m in data["matches"]] == [2]

    def test_skipped_when_corpus_unreadable(self, runner, tmp_path):
        """A broken corpus skips the check and still exits 0."""
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")
        result = runner.invoke(main, ["check", "뱀꿈", "--corpus", str(path)])
        assert result.exit_code == 0
        assert "skipped" in result.output

    def test_no_source(self, runner):
        """Without a corpus or Supabase settings the command fails."""
        result = runner.invoke(main, ["check", "뱀꿈"])
        assert result.exit_code == 1

    def test_invalid_threshold(self, runner, corpus_file):
        """Out-of-range thresholds are rejected."""
        result = runner.invoke(main, ["check", "뱀꿈", "--corpus", str(corpus_file), "-t", "2"])
        assert result.exit_code == 1


class TestCheckFileCommand:
    """Test `dreamdup check-file`."""

    def test_batch(self, runner, corpus_file, tmp_path):
        """Each line is checked; any duplicate gives exit code 2."""
        keywords = tmp_path / "new.txt"
        keywords.write_text("뱀-꿈\n\n용꿈\n", encoding="utf-8")
        result = runner.invoke(
            main, ["check-file", str(keywords), "--corpus", str(corpus_file), "-f", "json"]
        )
        assert result.exit_code == 2
        data = json.loads(result.output)
        assert [report["query"] for report in data] == ["뱀-꿈", "용꿈"]
        assert [len(report["matches"]) for report in data] == [1, 0]


class TestUtilityCommands:
    """Test compare, normalize and slug."""

    def test_compare(self, runner):
        """compare shows distance and similarity."""
        result = runner.invoke(main, ["compare", "불꿈", "물 꿈"])
        assert result.exit_code == 0
        assert "Edit Distance" in result.output
        assert "50%" in result.output

    def test_normalize(self, runner):
        """normalize prints the comparison form."""
        result = runner.invoke(main, ["normalize", "Lotto 번호·꿈"])
        assert result.exit_code == 0
        assert result.output.strip() == "lotto번호꿈"

    def test_slug(self, runner):
        """slug prints the suggested slug."""
        result = runner.invoke(main, ["slug", "돼지 꿈 해몽"])
        assert result.exit_code == 0
        assert result.output.strip() == "돼지-꿈-해몽"


class TestConfigCommands:
    """Test config export/import."""

    def test_export_json(self, runner):
        """export prints the effective configuration."""
        result = runner.invoke(main, ["config", "export", "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["threshold"] == 0.9

    def test_import(self, runner, tmp_path):
        """import copies a config file into the user config."""
        source = tmp_path / "team.yaml"
        source.write_text("threshold: 0.85\ntable: dream_entries\n", encoding="utf-8")
        result = runner.invoke(main, ["config", "import", str(source)])
        assert result.exit_code == 0

        export = runner.invoke(main, ["config", "export", "--format", "json"])
        data = json.loads(export.output)
        assert data["threshold"] == 0.85
        assert data["table"] == "dream_entries"


class TestOutputFormatter:
    """Test message formatting."""

    def test_error_text_is_escaped(self, capsys):
        """Markup-like text in an error is printed literally."""
        OutputFormatter().print_error("bad value [bold]x[/bold]")
        assert "bad value [bold]x[/bold]" in capsys.readouterr().err
