"""
Katabatic Engine Models

Data structures shared by the factor analyzer, the mountain-wave analyzer
and the composite scorer:
- WeatherSample / WeatherSeries: immutable forecast input for two locations
- TimeWindow / Criteria: per-call thresholds and clock-hour windows
- *Factor records, MountainWaveAnalysis, StabilityProfile: analyzer outputs
- KatabaticPrediction / AnalysisSummary: final decision records
"""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple
from zoneinfo import ZoneInfo
import math

from config import (
    DEFAULT_TIMEZONE,
    DEFAULT_MAX_PRECIPITATION_PROBABILITY,
    DEFAULT_MIN_CLOUD_COVER_CLEAR_PERIOD,
    DEFAULT_MIN_PRESSURE_CHANGE,
    DEFAULT_MIN_TEMPERATURE_DIFFERENTIAL,
    DEFAULT_CLEAR_SKY_WINDOW,
    DEFAULT_PREDICTION_WINDOW,
    DEFAULT_MINIMUM_CONFIDENCE,
    DEFAULT_INCLUDE_WAVE_FACTORS,
)

UTC = ZoneInfo("UTC")

Trend = Literal["rising", "falling", "stable"]
ConfidenceTier = Literal["low", "medium", "high"]
Recommendation = Literal["go", "maybe", "skip"]
Enhancement = Literal["positive", "neutral", "negative"]

# Provider payloads use camelCase; both spellings are accepted on input.
_SAMPLE_KEYS = {
    "temperature": ("temperature",),
    "pressure": ("pressure",),
    "precipitation_probability": ("precipitation_probability", "precipitationProbability"),
    "cloud_cover": ("cloud_cover", "cloudCover"),
    "wind_speed": ("wind_speed", "windSpeed"),
    "wind_direction": ("wind_direction", "windDirection"),
    "humidity": ("humidity",),
}

_CRITERIA_KEYS = {
    "max_precipitation_probability": "maxPrecipitationProbability",
    "min_cloud_cover_clear_period": "minCloudCoverClearPeriod",
    "min_pressure_change": "minPressureChange",
    "min_temperature_differential": "minTemperatureDifferential",
    "clear_sky_window": "clearSkyWindow",
    "prediction_window": "predictionWindow",
    "minimum_confidence": "minimumConfidence",
    "include_wave_factors": "includeWaveFactors",
}


def _as_float(value: Any, name: str) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Field {name!r} is not numeric: {value!r}") from None
    if not math.isfinite(number):
        raise ValueError(f"Field {name!r} is not finite: {value!r}")
    return number


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Field {name!r} is not a boolean: {value!r}")


def clamp_confidence(value: float) -> float:
    """Clamp a confidence score to [0, 100]; NaN becomes 0."""
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(100.0, float(value)))


# =============================================================================
# Input
# =============================================================================

@dataclass(frozen=True)
class WeatherSample:
    """One hourly forecast point. Units: °C, hPa, %, m/s, degrees."""
    timestamp: int                          # epoch milliseconds
    temperature: float = 0.0
    pressure: float = 0.0
    precipitation_probability: float = 0.0
    cloud_cover: float = 0.0
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    humidity: float = 0.0

    @property
    def time_utc(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000.0, tz=UTC)

    def local_hour(self, tz: ZoneInfo) -> int:
        return self.time_utc.astimezone(tz).hour

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherSample":
        if "timestamp" not in data:
            raise ValueError("Weather sample is missing 'timestamp'")
        try:
            timestamp = int(data["timestamp"])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid timestamp: {data['timestamp']!r}") from None

        values = {}
        for attr, keys in _SAMPLE_KEYS.items():
            raw = None
            for key in keys:
                if data.get(key) is not None:
                    raw = data[key]
                    break
            values[attr] = _as_float(raw, attr)
        return cls(timestamp=timestamp, **values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _parse_samples(raw: Any, location: str) -> Tuple[WeatherSample, ...]:
    if isinstance(raw, dict):
        raw = raw.get("hourlyForecast", raw.get("hourly_forecast"))
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Series for {location!r} must be a list of samples")
    return tuple(WeatherSample.from_dict(item) for item in raw)


@dataclass(frozen=True)
class WeatherSeries:
    """Pre-fetched forecast for the valley and mountain locations."""
    valley: Tuple[WeatherSample, ...] = ()
    mountain: Tuple[WeatherSample, ...] = ()
    timezone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], timezone: Optional[str] = None) -> "WeatherSeries":
        if not isinstance(data, dict):
            raise ValueError("Weather series document must be an object")
        valley_raw = data.get("valley", data.get("morrison"))
        tz_name = timezone or data.get("timezone") or DEFAULT_TIMEZONE
        try:
            ZoneInfo(tz_name)
        except Exception:
            raise ValueError(f"Unknown timezone: {tz_name!r}") from None
        return cls(
            valley=_parse_samples(valley_raw, "valley"),
            mountain=_parse_samples(data.get("mountain"), "mountain"),
            timezone=tz_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timezone": self.timezone,
            "valley": [s.to_dict() for s in self.valley],
            "mountain": [s.to_dict() for s in self.mountain],
        }


# =============================================================================
# Criteria
# =============================================================================

def _parse_hour(value: str) -> int:
    try:
        hour = int(str(value).split(":")[0])
    except (TypeError, ValueError):
        raise ValueError(f"Invalid clock time: {value!r}") from None
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range in {value!r}")
    return hour


@dataclass(frozen=True)
class TimeWindow:
    """Clock-hour window such as 02:00-05:00 (inclusive on both hours)."""
    start: str
    end: str

    def __post_init__(self):
        _parse_hour(self.start)
        _parse_hour(self.end)

    @property
    def start_hour(self) -> int:
        return _parse_hour(self.start)

    @property
    def end_hour(self) -> int:
        return _parse_hour(self.end)

    @property
    def wraps_midnight(self) -> bool:
        return self.start_hour > self.end_hour

    @property
    def label(self) -> str:
        return f"{self.start}-{self.end}"

    @classmethod
    def from_value(cls, value: Any) -> "TimeWindow":
        if isinstance(value, TimeWindow):
            return value
        if isinstance(value, dict) and "start" in value and "end" in value:
            return cls(start=str(value["start"]), end=str(value["end"]))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(start=str(value[0]), end=str(value[1]))
        raise ValueError(f"Invalid time window: {value!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class Criteria:
    """Thresholds and windows for one prediction call."""
    max_precipitation_probability: float = DEFAULT_MAX_PRECIPITATION_PROBABILITY
    min_cloud_cover_clear_period: float = DEFAULT_MIN_CLOUD_COVER_CLEAR_PERIOD
    min_pressure_change: float = DEFAULT_MIN_PRESSURE_CHANGE
    min_temperature_differential: float = DEFAULT_MIN_TEMPERATURE_DIFFERENTIAL
    clear_sky_window: TimeWindow = field(default_factory=lambda: TimeWindow(*DEFAULT_CLEAR_SKY_WINDOW))
    prediction_window: TimeWindow = field(default_factory=lambda: TimeWindow(*DEFAULT_PREDICTION_WINDOW))
    minimum_confidence: float = DEFAULT_MINIMUM_CONFIDENCE
    include_wave_factors: bool = DEFAULT_INCLUDE_WAVE_FACTORS

    def with_overrides(self, **overrides: Any) -> "Criteria":
        """Copy with the given fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in ("clear_sky_window", "prediction_window"):
            if key in changes:
                changes[key] = TimeWindow.from_value(changes[key])
        unknown = set(changes) - set(_CRITERIA_KEYS)
        if unknown:
            raise ValueError(f"Unknown criteria fields: {sorted(unknown)}")
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Criteria":
        if not data:
            return cls()
        overrides = {}
        for attr, camel in _CRITERIA_KEYS.items():
            if attr in data:
                overrides[attr] = data[attr]
            elif camel in data:
                overrides[attr] = data[camel]
        for attr, value in list(overrides.items()):
            if attr in ("clear_sky_window", "prediction_window", "include_wave_factors") or value is None:
                continue
            overrides[attr] = _as_float(value, attr)
        if overrides.get("include_wave_factors") is not None:
            overrides["include_wave_factors"] = _as_bool(overrides["include_wave_factors"], "include_wave_factors")
        return cls().with_overrides(**overrides)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_precipitation_probability": self.max_precipitation_probability,
            "min_cloud_cover_clear_period": self.min_cloud_cover_clear_period,
            "min_pressure_change": self.min_pressure_change,
            "min_temperature_differential": self.min_temperature_differential,
            "clear_sky_window": self.clear_sky_window.to_dict(),
            "prediction_window": self.prediction_window.to_dict(),
            "minimum_confidence": self.minimum_confidence,
            "include_wave_factors": self.include_wave_factors,
        }


# =============================================================================
# Factor records
# =============================================================================

@dataclass(frozen=True)
class PrecipitationFactor:
    meets: bool
    value: float            # max precipitation probability (%)
    threshold: float
    confidence: float


@dataclass(frozen=True)
class SkyConditionsFactor:
    meets: bool
    clear_period_coverage: float    # % of clear-sky window with cloud < 30%
    average_cloud_cover: float
    threshold: float
    confidence: float


@dataclass(frozen=True)
class PressureChangeFactor:
    meets: bool
    change: float           # hPa, last minus first of trailing samples
    trend: Trend
    threshold: float
    confidence: float


@dataclass(frozen=True)
class TemperatureDifferentialFactor:
    meets: bool
    differential: float     # valley minus mountain (°C)
    valley_temp: float
    mountain_temp: float
    threshold: float
    confidence: float


@dataclass(frozen=True)
class WavePatternFactor:
    meets: bool
    froude_number: float
    wave_enhancement: Enhancement
    confidence: float
    analysis: str


@dataclass(frozen=True)
class StabilityFactor:
    meets: bool
    surface_stability: float
    coupling_efficiency: float
    confidence: float
    analysis: str


@dataclass(frozen=True)
class KatabaticFactors:
    precipitation: PrecipitationFactor
    sky_conditions: SkyConditionsFactor
    pressure_change: PressureChangeFactor
    temperature_differential: TemperatureDifferentialFactor
    wave_pattern: Optional[WavePatternFactor] = None
    atmospheric_stability: Optional[StabilityFactor] = None

    def core(self) -> Tuple[Any, Any, Any, Any]:
        """The four katabatic factors in scoring order."""
        return (
            self.precipitation,
            self.sky_conditions,
            self.pressure_change,
            self.temperature_differential,
        )

    @property
    def factors_met(self) -> int:
        return sum(1 for f in self.core() if f.meets)

    @property
    def has_wave_factors(self) -> bool:
        return self.wave_pattern is not None and self.atmospheric_stability is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "precipitation": asdict(self.precipitation),
            "sky_conditions": asdict(self.sky_conditions),
            "pressure_change": asdict(self.pressure_change),
            "temperature_differential": asdict(self.temperature_differential),
        }
        if self.wave_pattern is not None:
            data["wave_pattern"] = asdict(self.wave_pattern)
        if self.atmospheric_stability is not None:
            data["atmospheric_stability"] = asdict(self.atmospheric_stability)
        return data


# =============================================================================
# Mountain wave records
# =============================================================================

@dataclass(frozen=True)
class MountainWaveAnalysis:
    froude_number: float
    wave_amplitude: Literal["low", "moderate", "high"]
    wave_organization: Literal["organized", "mixed", "chaotic"]
    surface_coupling: Literal["strong", "moderate", "weak"]
    wave_propagation_potential: float
    enhancement_potential: Enhancement
    analysis: str = ""
    fallback: bool = False  # True when this is the fixed default record

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StabilityProfile:
    surface_stability: float        # s^-1
    wave_level_stability: float     # s^-1
    stability_gradient: Literal["increasing", "decreasing", "uniform"]
    coupling_efficiency: float
    profile_optimal: bool
    analysis: str = ""
    fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Prediction
# =============================================================================

@dataclass(frozen=True)
class BestTimeWindow:
    start: datetime
    end: datetime
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class KatabaticPrediction:
    probability: int
    confidence: ConfidenceTier
    factors: KatabaticFactors
    recommendation: Recommendation
    explanation: str
    detailed_analysis: str
    best_time_window: Optional[BestTimeWindow]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "probability": self.probability,
            "confidence": self.confidence,
            "factors": self.factors.to_dict(),
            "recommendation": self.recommendation,
            "explanation": self.explanation,
            "detailed_analysis": self.detailed_analysis,
            "best_time_window": self.best_time_window.to_dict() if self.best_time_window else None,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    probability: int
    confidence: ConfidenceTier
    recommendation: Recommendation
    factors_met: int
    total_factors: int
    primary_concern: str
    best_aspect: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
