"""Tests for the tg-reporter command line."""

import json
import shutil
from pathlib import Path
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from tg_reporter.cli import app


FIXTURES_DIR = Path(__file__).parent / "fixtures"

runner = CliRunner()


def write_config(tmp_path) -> str:
    """Copy the fixture config and messages into a scratch data dir."""
    config_path = tmp_path / "config.json"
    shutil.copy(FIXTURES_DIR / "sample_config.json", config_path)
    raw_dir = tmp_path / "data" / "raw"
    raw_dir.mkdir(parents=True)
    shutil.copy(FIXTURES_DIR / "sample_messages.csv", raw_dir / "messages_POL.csv")
    return str(config_path)


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_analyze_region(self, tmp_path):
        config = write_config(tmp_path)

        result = runner.invoke(app, ["analyze", "--region", "POL", "--config", config])

        assert result.exit_code == 0
        assert "Analyzed 11 messages for POL" in result.output
        assert "unparseable dates" in result.output
        saved = json.loads((tmp_path / "data" / "analyzed" / "analysis_POL.json").read_text(encoding="utf-8"))
        assert saved["messageCount"] == 11

    def test_analyze_missing_messages(self, tmp_path):
        config = write_config(tmp_path)
        (tmp_path / "data" / "raw" / "messages_POL.csv").unlink()

        result = runner.invoke(app, ["analyze", "-r", "POL", "-c", config])

        assert result.exit_code == 1
        assert "No analysis data for POL" in result.output

    def test_analyze_unknown_region(self, tmp_path):
        config = write_config(tmp_path)

        result = runner.invoke(app, ["analyze", "-r", "XYZ", "-c", config])

        assert result.exit_code == 1
        assert "Invalid region code" in result.output

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", "-r", "POL", "-c", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestReportCommand:
    """Tests for the report and content commands."""

    def setup_method(self):
        self.llm = Mock()
        self.llm.model = "test-model"
        self.llm.generate.return_value = "Итоговый отчет"

    def test_report_after_analysis(self, tmp_path):
        config = write_config(tmp_path)
        runner.invoke(app, ["analyze", "-r", "POL", "-c", config])

        with patch("tg_reporter.pipeline.create_llm_client", return_value=self.llm):
            result = runner.invoke(app, ["report", "-r", "POL", "-c", config])

        assert result.exit_code == 0
        assert "Итоговый отчет" in result.output

    def test_report_without_analysis(self, tmp_path):
        config = write_config(tmp_path)

        with patch("tg_reporter.pipeline.create_llm_client", return_value=self.llm):
            result = runner.invoke(app, ["report", "-r", "POL", "-c", config])

        assert result.exit_code == 1
        assert "No analysis data" in result.output

    def test_content_invalid_type(self, tmp_path):
        config = write_config(tmp_path)

        result = runner.invoke(app, ["content", "-r", "POL", "-t", "poster", "-c", config])

        assert result.exit_code == 1
        assert "Invalid report type" in result.output


class TestRefreshCommand:
    """Tests for the refresh command."""

    def test_refresh_active_regions(self, tmp_path):
        config = write_config(tmp_path)
        llm = Mock(model="test-model")
        llm.generate.return_value = "Отчет"

        with patch("tg_reporter.pipeline.create_llm_client", return_value=llm):
            result = runner.invoke(app, ["refresh", "-c", config])

        assert result.exit_code == 0
        assert "POL" in result.output
        assert "CZE" not in result.output
        assert (tmp_path / "data" / "reports" / "report_POL.txt").exists()


class TestConfigCommands:
    """Tests for validate and sample-config."""

    def test_validate_fixture(self):
        result = runner.invoke(app, ["validate", "--config", str(FIXTURES_DIR / "sample_config.json")])

        assert result.exit_code == 0
        assert "Validation passed" in result.output

    def test_validate_broken_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"themes": {"Жильё": "квартир"}}), encoding="utf-8")

        result = runner.invoke(app, ["validate", "-c", str(path)])

        assert result.exit_code == 1
        assert "Missing required field: regions" in result.output

    def test_sample_config_roundtrip(self, tmp_path):
        output = tmp_path / "config.json"

        result = runner.invoke(app, ["sample-config", "-o", str(output)])

        assert result.exit_code == 0
        validated = runner.invoke(app, ["validate", "-c", str(output)])
        assert validated.exit_code == 0
