import os
import sys
from datetime import datetime, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_site
from core.models import Criteria
from synthesizer.narrative import format_prediction_log, summarize_prediction
from synthesizer.scoring import analyze_prediction
from series_factory import make_series

REFERENCE = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_go_explanation_embeds_counts():
    prediction = analyze_prediction(make_series(), reference_utc=REFERENCE)
    assert prediction.explanation.startswith("Strong conditions!")
    assert "4/4" in prediction.explanation
    assert "89%" in prediction.explanation


def test_maybe_explanation():
    prediction = analyze_prediction(make_series(precipitation=45.0), reference_utc=REFERENCE)
    assert prediction.explanation.startswith("Mixed conditions.")
    assert "3/4" in prediction.explanation
    assert "67%" in prediction.explanation
    assert "rain" not in prediction.explanation


def test_skip_explanation():
    prediction = analyze_prediction(
        make_series(precipitation=60.0, cloud_cover=90.0, pressure_change=0.0),
        reference_utc=REFERENCE,
    )
    assert prediction.recommendation == "skip"
    assert prediction.explanation.startswith("Poor conditions.")
    assert "1/4" in prediction.explanation


def test_detailed_analysis_lines():
    prediction = analyze_prediction(make_series(), reference_utc=REFERENCE)
    text = prediction.detailed_analysis
    assert "PRECIPITATION: ✅ 5% chance" in text
    assert "CLEAR SKY: ✅ 100% clear period" in text
    assert "+3.0 hPa rising" in text
    assert "7.0°C" in text
    assert "valley 10.0°C / mountain 3.0°C" in text
    assert "WAVE PATTERN" not in text


def test_detailed_analysis_with_wave_factors():
    criteria = Criteria().with_overrides(include_wave_factors=True)
    prediction = analyze_prediction(make_series(), criteria, reference_utc=REFERENCE)
    assert "WAVE PATTERN: ❌" in prediction.detailed_analysis
    assert "STABILITY: ❌ 30% coupling efficiency" in prediction.detailed_analysis


def test_format_prediction_log():
    prediction = analyze_prediction(make_series(), reference_utc=REFERENCE)
    line = format_prediction_log(get_site("valley"), prediction)
    assert line == "[valley] 2026-10-19 06:00-08:00 | 4/4 | P=89% high | GO"


class TestSummary:

    def test_all_met_monitors_weakest_factor(self):
        summary = summarize_prediction(analyze_prediction(make_series(), reference_utc=REFERENCE))
        assert summary.factors_met == 4
        assert summary.total_factors == 4
        assert summary.primary_concern == "Monitor high precipitation risk"
        assert summary.best_aspect == "Clear skies"

    def test_unmet_factor_is_primary_concern(self):
        summary = summarize_prediction(
            analyze_prediction(make_series(precipitation=45.0), reference_utc=REFERENCE)
        )
        assert summary.primary_concern == "High precipitation risk"
        assert summary.recommendation == "maybe"
        assert summary.to_dict()["probability"] == 67
