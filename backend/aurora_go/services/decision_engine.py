"""Binary GO / NO_GO aurora decision.

Aurora needs four things: darkness, southward IMF (Bz < 0), enough solar wind
energy to push the oval to the observer's latitude, and a clear sky. The hard
rules run first in fixed order and the first match wins:

  1. no telemetry               NO_GO high
  2. not dark                   NO_GO high
  3. Bz >= 0 (northward)        NO_GO high
  4. below visible latitude     NO_GO high
  5. weak Bz, low pressure      NO_GO high
  6. low cloud > 50%            NO_GO high
  7. sky clarity < 40           NO_GO medium

If nothing trips, a go-score is accumulated from Bz strength, duration, speed,
pressure, density, clock angle, similarity, latitude margin, sky clarity and
the OVATION forecast, then compared against latitude-margin-aware thresholds.
A "marginal" outcome is still NO_GO; there is no third state.
"""

import logging
import math
from datetime import datetime, timezone

from aurora_go.schemas.decision import Decision
from aurora_go.schemas.sky import CloudConditions, DarknessInfo, OvationForecast
from aurora_go.schemas.space_weather import SpaceWeatherReading
from aurora_go.services import visibility

logger = logging.getLogger(__name__)

GO = "GO"
NO_GO = "NO_GO"

STRONG_GO_SCORE = 55
GO_SCORE = 45
MARGINAL_SCORE = 35

_CONFIDENCE_STEPS = ["low", "medium", "high"]


def sky_clarity(clouds: CloudConditions | None) -> int:
    """0-100; low cloud blocks fully, mid cloud mostly, high cloud slightly."""
    if clouds is None:
        return 100
    weighted = (clouds.low or 0) * 1.0 + (clouds.mid or 0) * 0.7 + (clouds.high or 0) * 0.3
    return max(0, round(100 - min(weighted, 100)))


def decide(
    reading: SpaceWeatherReading | None,
    darkness: DarknessInfo,
    latitude: float,
    clouds: CloudConditions | None = None,
    ovation: OvationForecast | None = None,
    now: datetime | None = None,
) -> Decision:
    decision = _evaluate(reading, darkness, latitude, clouds, ovation)
    decision.decided_at = now or datetime.now(timezone.utc)
    logger.debug("Decision %s (%s): %s", decision.verdict, decision.reason_code, decision.reason)
    return decision


def _evaluate(
    reading: SpaceWeatherReading | None,
    darkness: DarknessInfo,
    latitude: float,
    clouds: CloudConditions | None,
    ovation: OvationForecast | None,
) -> Decision:
    # 1. Fail safe: without live telemetry there is nothing to base a GO on
    if reading is None or reading.degraded:
        detail = reading.degraded_reason if reading is not None and reading.degraded_reason else "no response"
        return Decision(
            verdict=NO_GO,
            reason_code="NO_TELEMETRY",
            reason="Cannot fetch live space weather data",
            action=f"Solar wind telemetry unavailable ({detail}). Try again in a few minutes.",
            confidence="high",
            contributing_factors=["No live telemetry"],
        )

    bz = reading.bz
    speed = reading.speed
    density = reading.density
    pressure = reading.pressure
    clock_angle = reading.clock_angle
    similarity = reading.similarity
    bz_duration = reading.bz_south_minutes

    # 2. Darkness
    if not darkness.can_view_aurora:
        if darkness.hours_until_dark:
            time_note = f"Dark in ~{darkness.hours_until_dark:g} hours."
        else:
            time_note = "Check back after sunset."
        space_weather_note = (
            f"Space weather is active (Bz {bz:.1f} nT)." if bz < -5 else "Space weather is quiet."
        )
        return Decision(
            verdict=NO_GO,
            reason_code="NOT_DARK",
            reason=darkness.description,
            action=f"Aurora is only visible at night. {time_note} {space_weather_note}",
            confidence="high",
            contributing_factors=[f"Sun at {darkness.solar_altitude_deg:.1f}° ({darkness.level})"],
        )

    # 3. Northward IMF keeps the magnetosphere closed
    if bz >= 0:
        return Decision(
            verdict=NO_GO,
            reason_code="BZ_NORTHWARD",
            reason=f"Bz is {bz:+.1f} nT (northward)",
            action="IMF is northward - magnetosphere is closed. No aurora possible until Bz goes negative.",
            confidence="high",
            contributing_factors=["Northward Bz"],
        )

    visible_lat = visibility.for_reading(reading)
    my_lat = abs(latitude)
    margin = my_lat - visible_lat

    # 4. Aurora oval does not reach the observer
    if margin < 0:
        gap = -margin
        return Decision(
            verdict=NO_GO,
            reason_code="LATITUDE_TOO_LOW",
            reason=f"Aurora at {visible_lat:.0f}°+, you're at {my_lat:.1f}° ({gap:.1f}° short)",
            action=(
                f"Aurora won't reach your latitude. Need Bz < -{math.ceil(abs(bz) + gap / 2)} nT "
                f"or a G{max(1, math.ceil(gap / 10))}+ storm. Current Bz: {bz:.1f} nT."
            ),
            confidence="high",
            contributing_factors=[f"Visible latitude {visible_lat:.0f}°", f"Latitude gap {gap:.1f}°"],
            visible_latitude=visible_lat,
            latitude_margin=round(margin, 1),
        )

    pressure_high = pressure > 3

    # 5. Weakly southward Bz without compression only reaches high latitudes
    if bz > -5 and not pressure_high:
        return Decision(
            verdict=NO_GO,
            reason_code="BZ_WEAK",
            reason=f"Bz only {bz:.1f} nT (weak)",
            action=f"Bz not strong enough. Aurora limited to {visible_lat:.0f}°+. Need Bz < -8 nT for a good display.",
            confidence="high",
            contributing_factors=[f"Weak Bz {bz:.1f} nT", f"Pressure {pressure:.1f} nPa"],
            visible_latitude=visible_lat,
            latitude_margin=round(margin, 1),
        )

    sky = sky_clarity(clouds)
    trend = clouds.trend if clouds is not None else "unknown"

    # 6. Low cloud blocks the sky regardless of activity
    if clouds is not None and clouds.low > 50:
        return Decision(
            verdict=NO_GO,
            reason_code="LOW_CLOUDS",
            reason=f"{clouds.low:.0f}% low cloud cover",
            action=(
                f"Aurora IS active (Bz {bz:.1f} nT) but low clouds are blocking the view. "
                + ("Clearing soon!" if trend == "clearing" else "Find clearer skies.")
            ),
            confidence="high",
            contributing_factors=["Low cloud blocking", "Aurora active"],
            visible_latitude=visible_lat,
            latitude_margin=round(margin, 1),
            sky_clarity=sky,
        )

    # 7. Overall sky too murky
    if sky < 40:
        return Decision(
            verdict=NO_GO,
            reason_code="SKY_OBSCURED",
            reason=f"Only {sky}% sky clarity",
            action=(
                "Cloud cover too heavy. "
                + ("Forecast shows clearing - wait!" if trend == "clearing"
                   else "Try a location with clearer skies.")
            ),
            confidence="medium",
            contributing_factors=[f"Total cloud {clouds.total:.0f}%" if clouds else "Cloudy"],
            visible_latitude=visible_lat,
            latitude_margin=round(margin, 1),
            sky_clarity=sky,
        )

    go_score, factors = _go_score(
        bz=bz,
        bz_duration=bz_duration,
        speed=speed,
        pressure=pressure,
        density=density,
        clock_angle=clock_angle,
        similarity=similarity,
        margin=margin,
        sky=sky,
        ovation=ovation,
    )
    sky_clear = sky >= 60
    clouds_assumed = clouds is None or clouds.degraded
    ovation_note = _ovation_note(ovation)
    common = dict(
        go_score=go_score,
        visible_latitude=visible_lat,
        latitude_margin=round(margin, 1),
        sky_clarity=sky,
        contributing_factors=factors,
    )

    if go_score >= STRONG_GO_SCORE and sky_clear and margin >= 5:
        return Decision(
            verdict=GO,
            reason_code="STRONG_GO",
            reason=_headline(factors),
            action=(
                f"Strong aurora likely! Visible to {visible_lat:.0f}° (you're at {my_lat:.1f}°). "
                "Go now: dark sky, face the pole, allow 20 min for eye adjustment."
                + (f" {ovation_note}" if ovation_note else "")
            ),
            confidence=_adjust("high", clouds_assumed),
            **common,
        )

    if go_score >= GO_SCORE and sky >= 50 and margin >= 0:
        return Decision(
            verdict=GO,
            reason_code="GO",
            reason=_headline(factors),
            action=(
                f"Good conditions! Aurora at {visible_lat:.0f}° should reach you. "
                + ("Find a dark location." if sky_clear else "Watch for cloud breaks.")
                + (f" {ovation_note}" if ovation_note else "")
            ),
            confidence=_adjust("medium", clouds_assumed),
            **common,
        )

    if go_score >= MARGINAL_SCORE and sky >= 50 and margin >= -3:
        return Decision(
            verdict=NO_GO,
            reason_code="MARGINAL",
            reason=f"Marginal: aurora at {visible_lat:.0f}°, you're at {my_lat:.1f}°",
            action=(
                "Aurora may be faint at your latitude. Wait for Bz to strengthen "
                f"(currently {bz:.1f} nT) or conditions to improve."
            ),
            confidence=_adjust("medium", clouds_assumed),
            **common,
        )

    return Decision(
        verdict=NO_GO,
        reason_code="INSUFFICIENT",
        reason=f"Bz {bz:.1f} nT, need stronger (score {go_score})",
        action=(
            f"Current conditions won't produce visible aurora at {my_lat:.1f}°. "
            "Need Bz < -10 nT or a G2+ storm. Check again in 30 min."
        ),
        confidence=_adjust("medium", clouds_assumed),
        **common,
    )


def _go_score(
    bz: float,
    bz_duration: int,
    speed: float,
    pressure: float,
    density: float,
    clock_angle: float,
    similarity: int,
    margin: float,
    sky: int,
    ovation: OvationForecast | None,
) -> tuple[int, list[str]]:
    score = 0
    factors: list[str] = []

    bz_good = bz < -3
    bz_strong = bz < -8
    sustained = bz_duration >= 15

    if bz < -15:
        score += 35
        factors.append(f"Bz {bz:.1f} nT (extreme!)")
    elif bz_strong:
        score += 25
        factors.append(f"Bz {bz:.1f} nT (strong)")
    elif bz_good:
        score += 12
        factors.append(f"Bz {bz:.1f} nT")

    if sustained and bz_strong:
        score += 12
        factors.append(f"{bz_duration} min sustained")
    elif sustained and bz_good:
        score += 6

    if speed > 600:
        score += 12
        factors.append(f"{speed:.0f} km/s")
    elif speed > 450:
        score += 6

    if pressure > 3:
        score += 6
        factors.append(f"{pressure:.1f} nPa")

    if density > 20:
        score += 8
        factors.append(f"{density:.0f} p/cm³")
    elif density > 10:
        score += 4

    if 120 < clock_angle < 240:
        score += 4

    if similarity >= 50:
        score += 8
    elif similarity >= 30:
        score += 4

    if margin > 10:
        score += 10
        factors.append(f"{margin:.0f}° margin")
    elif margin > 5:
        score += 5

    if sky >= 60:
        score += 8
    elif sky >= 40:
        score += 4

    # OVATION is corroborating evidence only
    if ovation is not None:
        if ovation.at_location >= 30:
            score += 8
            factors.append(f"NOAA OVATION {ovation.at_location}% here")
        elif ovation.nearby_max >= 40:
            score += 4
            factors.append(f"NOAA OVATION {ovation.nearby_max}% poleward")

    return score, factors


def _headline(factors: list[str]) -> str:
    return " • ".join(factors[:2]) or "Favourable aurora conditions"


def _ovation_note(ovation: OvationForecast | None) -> str:
    if ovation is None:
        return ""
    if ovation.at_location >= 30:
        return f"NOAA: {ovation.at_location}% at your location."
    if ovation.nearby_max >= 40:
        return f"NOAA: {ovation.nearby_max}% visible poleward."
    if ovation.at_location >= 10 or ovation.nearby_max >= 20:
        return f"NOAA: {max(ovation.at_location, ovation.nearby_max)}% nearby."
    return ""


def _adjust(confidence: str, clouds_assumed: bool) -> str:
    """Drop one confidence step when the sky was assumed clear rather than observed."""
    if not clouds_assumed:
        return confidence
    return _CONFIDENCE_STEPS[max(0, _CONFIDENCE_STEPS.index(confidence) - 1)]
