"""Command line entry point."""

import json

import pytest

from chinese_astro import run


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(run, "setup_logging", lambda level: None)


def test_compatibility_command(capsys):
    assert run.main(["compatibility", "rat", "dragon"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["relationship_type"] == "triangle_adjacent"


def test_errors_are_reported_as_json(capsys):
    assert run.main(["compatibility", "rat", "rat"]) == 1
    error = json.loads(capsys.readouterr().err)
    assert error["code"] == "VALIDATION_ERROR"


def test_chart_command(capsys):
    code = run.main(["chart", "--birth-date", "1990-05-15", "--birth-time", "14:30", "--current-year", "2024"])
    assert code == 0
    assert json.loads(capsys.readouterr().out)["summary"] == "GengWu DingChou RenZi DingWei"


def test_horoscope_command(capsys):
    code = run.main(["horoscope", "--birth-date", "1990-05-15", "--birth-time", "14:30",
                     "--type", "daily", "--date", "2024-01-05"])
    assert code == 0
    data = json.loads(capsys.readouterr().out)
    assert data["type"] == "daily"
    assert data["animal_sign"] == "Horse"


def test_bad_birth_time(capsys):
    assert run.main(["chart", "--birth-date", "1990-05-15", "--birth-time", "noon"]) == 1
    assert json.loads(capsys.readouterr().err)["details"]["field"] == "birth_time"


def test_nan_utc_offset_is_rejected(capsys):
    code = run.main(["chart", "--birth-date", "1990-05-15", "--birth-time", "14:30", "--utc-offset", "nan"])
    assert code == 1
    error = json.loads(capsys.readouterr().err)
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]["field"] == "timezone_offset"


def test_metrics_out_writes_prometheus_text(tmp_path, capsys):
    path = tmp_path / "metrics.prom"
    assert run.main(["--metrics-out", str(path), "compatibility", "horse", "goat"]) == 0
    capsys.readouterr()
    text = path.read_text()
    assert "chinese_astro_compatibility_cache_miss_total 1.0" in text
    assert "chinese_astro_compatibility_calculations_total" in text


def test_metrics_out_written_on_error(tmp_path, capsys):
    path = tmp_path / "metrics.prom"
    code = run.main(["--metrics-out", str(path), "chart", "--birth-date", "1990-02-30", "--birth-time", "12:00"])
    assert code == 1
    capsys.readouterr()
    assert path.exists()
