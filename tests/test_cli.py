import json
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from katabatic_cli import main, parse_reference
from series_factory import make_series


def _write_forecast(tmp_path, **kwargs):
    path = tmp_path / "forecast.json"
    path.write_text(json.dumps(make_series(**kwargs).to_dict()), encoding="utf-8")
    return str(path)


def test_predict_json(tmp_path, capsys):
    path = _write_forecast(tmp_path)
    rc = main(["predict", "--input", path, "--reference", "2026-10-18T12:00:00Z", "--json"])
    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["prediction"]["probability"] == 89
    assert payload["prediction"]["recommendation"] == "go"
    assert payload["prediction"]["best_time_window"]["start"] == "2026-10-19T06:00:00-06:00"
    assert payload["summary"]["best_aspect"] == "Clear skies"


def test_predict_text_with_waves(tmp_path, capsys):
    path = _write_forecast(tmp_path)
    rc = main(["predict", "--input", path, "--reference", "2026-10-18T12:00:00Z", "--waves"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Probability:    75%" in out
    assert "WAVE PATTERN" in out


def test_predict_with_criteria_file(tmp_path, capsys):
    path = _write_forecast(tmp_path, precipitation=45.0)
    criteria_path = tmp_path / "criteria.json"
    criteria_path.write_text(json.dumps({"minimumConfidence": 70}), encoding="utf-8")
    rc = main(["predict", "--input", path, "--criteria", str(criteria_path), "--json"])
    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["prediction"]["recommendation"] == "skip"


def test_waves_json(tmp_path, capsys):
    path = _write_forecast(tmp_path, mountain_temp=10.0, wind_speed=10.0)
    rc = main(["waves", "--input", path, "--json"])
    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["waves"]["enhancement_potential"] == "positive"
    assert payload["stability"]["coupling_efficiency"] == 30.0


def test_criteria_prints_defaults(capsys):
    assert main(["criteria"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["clear_sky_window"] == {"start": "02:00", "end": "05:00"}


def test_bad_input_exits_with_usage_error(tmp_path):
    missing = tmp_path / "nope.json"
    assert main(["predict", "--input", str(missing)]) == 2

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert main(["predict", "--input", str(broken)]) == 2

    no_timestamp = tmp_path / "no_timestamp.json"
    no_timestamp.write_text(json.dumps({"valley": [{"temperature": 5}]}), encoding="utf-8")
    assert main(["waves", "--input", str(no_timestamp)]) == 2

    path = _write_forecast(tmp_path)
    assert main(["predict", "--input", path, "--reference", "someday"]) == 2


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "predict" in capsys.readouterr().out


def test_parse_reference():
    assert parse_reference(None) is None
    assert parse_reference("2026-10-18T12:00:00Z").utcoffset().total_seconds() == 0


def test_non_finite_forecast_value_exits_with_usage_error(tmp_path):
    path = tmp_path / "nan.json"
    path.write_text('{"valley": [{"timestamp": 0, "temperature": NaN}]}', encoding="utf-8")
    assert main(["predict", "--input", str(path)]) == 2
