"""Unit tests for ReporterService orchestration."""

import pytest
from unittest.mock import Mock

from tg_reporter.config import Config
from tg_reporter.pipeline import ReporterService
from tg_reporter.storage import NoAnalysisDataError


SAMPLE_CSV = (
    "id,date,text,group,geo\n"
    '1,2024-06-10,"ищу квартиру срочно",g1,POL\n'
    '2,2024-06-17,"нужна работа",g1,POL\n'
)


def make_config(tmp_path) -> Config:
    return Config.from_dict({
        "paths": {"dataDir": str(tmp_path / "data")},
        "regions": {
            "POL": {"name": "Польша"},
            "CZE": {"name": "Чехия"},
            "ITA": {"name": "Италия", "active": False},
        },
        "themes": {"Жильё": ["квартир"], "Работа": ["работ"]},
        "needsAndPains": {"Поиск жилья": ["ищу квартир"]},
    })


class TestReporterService:
    """Tests for ReporterService class."""

    def setup_method(self):
        self.llm = Mock()
        self.llm.model = "test-model"
        self.llm.generate.return_value = "Отчет"

    def _service(self, tmp_path, with_messages=("POL",)) -> ReporterService:
        service = ReporterService(make_config(tmp_path), llm=self.llm)
        for region in with_messages:
            (service.config.paths.raw / f"messages_{region}.csv").write_text(
                SAMPLE_CSV, encoding="utf-8"
            )
        return service

    def test_creates_data_directories(self, tmp_path):
        service = self._service(tmp_path, with_messages=())
        paths = service.config.paths

        for directory in (paths.raw, paths.analyzed, paths.reports, paths.charts, paths.cache):
            assert directory.is_dir()

    def test_analyze_unknown_region(self, tmp_path):
        service = self._service(tmp_path)

        with pytest.raises(ValueError):
            service.analyze("XYZ")

    def test_process_region_produces_all_outputs(self, tmp_path):
        service = self._service(tmp_path)
        paths = service.config.paths

        assert service.process_region("POL") is True

        assert (paths.analyzed / "analysis_POL.json").exists()
        assert (paths.reports / "report_POL.txt").read_text(encoding="utf-8") == "Отчет"
        assert set(service.existing_charts("POL")) == {"sentiment", "themes", "needs", "trends"}

    def test_process_region_forces_new_report(self, tmp_path):
        service = self._service(tmp_path)

        service.process_region("POL")
        service.process_region("POL")

        assert self.llm.generate.call_count == 2

    def test_process_region_missing_source_returns_false(self, tmp_path):
        service = self._service(tmp_path, with_messages=())

        assert service.process_region("POL") is False
        self.llm.generate.assert_not_called()

    def test_refresh_all_covers_active_regions(self, tmp_path):
        service = self._service(tmp_path, with_messages=("POL",))

        results = service.refresh_all()

        assert results == {"POL": True, "CZE": False}

    # ==================== Content Requests ====================

    def test_content_report_uses_cache(self, tmp_path):
        service = self._service(tmp_path)
        service.analyze("POL")

        first = service.generate_content("report", "POL")
        second = service.generate_content("report", "POL")

        assert first.report == second.report == "Отчет"
        assert first.charts == {}
        assert self.llm.generate.call_count == 1

    def test_content_new_report_regenerates(self, tmp_path):
        service = self._service(tmp_path)
        service.analyze("POL")

        service.generate_content("report", "POL")
        service.generate_content("new_report", "POL")

        assert self.llm.generate.call_count == 2

    def test_content_charts_only(self, tmp_path):
        service = self._service(tmp_path)
        service.analyze("POL")

        result = service.generate_content("charts", "POL")

        assert result.report is None
        assert len(result.charts) == 4
        assert all(path.exists() for path in result.charts.values())
        self.llm.generate.assert_not_called()

    def test_content_charts_reuses_existing_files(self, tmp_path):
        service = self._service(tmp_path)
        service.analyze("POL")
        service.generate_content("charts", "POL")
        service.charts = Mock()
        service.charts.chart_path.side_effect = (
            lambda t, r: service.config.paths.charts / f"{t}_{r}.png"
        )

        result = service.generate_content("charts", "POL")

        assert len(result.charts) == 4
        service.charts.render.assert_not_called()

    def test_content_full(self, tmp_path):
        service = self._service(tmp_path)
        service.analyze("POL")

        result = service.generate_content("full", "POL")

        assert result.report == "Отчет"
        assert len(result.charts) == 4

    def test_content_charts_without_analysis(self, tmp_path):
        service = self._service(tmp_path)

        with pytest.raises(NoAnalysisDataError):
            service.generate_content("charts", "POL")

    def test_content_invalid_type(self, tmp_path):
        service = self._service(tmp_path)

        with pytest.raises(ValueError) as excinfo:
            service.generate_content("poster", "POL")

        assert "Invalid report type" in str(excinfo.value)

    def test_content_invalid_region(self, tmp_path):
        service = self._service(tmp_path)

        with pytest.raises(ValueError) as excinfo:
            service.generate_content("report", "XYZ")

        assert "Invalid region code" in str(excinfo.value)
