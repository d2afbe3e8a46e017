"""Storm-similarity scoring against the G4 reference storm.

Each component is scored 0-100 as a percentage of the baseline value:
  bz(0.40) + speed(0.20) + density(0.15) + bt(0.10) + pressure(0.10) + temperature(0.05)

Bonuses on top of the weighted sum:
  +10 sustained southward Bz (>= 20 min with bz < -5)
  +5  bz < -15
  +5  speed > 600 km/s

The final score is capped at 99 so a reading never implies certainty.
"""

import math

from aurora_go.schemas.space_weather import STORM_BASELINE, ComponentScores, StormBaseline

MAX_SIMILARITY = 99

WEIGHTS: dict[str, float] = {
    "bz": 0.40,
    "speed": 0.20,
    "density": 0.15,
    "bt": 0.10,
    "pressure": 0.10,
    "temperature": 0.05,
}


def compute(
    bz: float,
    speed: float,
    density: float,
    bt: float,
    pressure: float,
    temperature: float,
    bz_south_minutes: int | None = 0,
    baseline: StormBaseline = STORM_BASELINE,
) -> tuple[ComponentScores, int]:
    """Return component scores and the bonused, capped similarity.

    Pass ``bz_south_minutes=None`` to skip the sustained-duration bonus when no
    rolling window is available (e.g. per-sample historical rescoring).
    """
    scores = component_scores(bz, speed, density, bt, pressure, temperature, baseline)
    similarity = weighted_sum(scores)

    if bz_south_minutes is not None and bz_south_minutes >= 20 and bz < -5:
        similarity += 10
    if bz < -15:
        similarity += 5
    if speed > 600:
        similarity += 5

    return scores, min(similarity, MAX_SIMILARITY)


def component_scores(
    bz: float,
    speed: float,
    density: float,
    bt: float,
    pressure: float,
    temperature: float,
    baseline: StormBaseline = STORM_BASELINE,
) -> ComponentScores:
    return ComponentScores(
        bz=_pct_of(abs(bz), abs(baseline.bz)),
        speed=_pct_of(speed, baseline.speed),
        density=_pct_of(density, baseline.density),
        bt=_pct_of(bt, baseline.bt),
        pressure=_pct_of(pressure, baseline.pressure),
        temperature=_pct_of(abs(temperature), abs(baseline.temperature)),
    )


def weighted_sum(scores: ComponentScores) -> int:
    total = sum(getattr(scores, name) * weight for name, weight in WEIGHTS.items())
    return max(0, round_half_up(total))


def round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; score thresholds expect .5 to round up.
    # The epsilon absorbs float noise such as 0.4 * 100 + ... = 99.99999999999999.
    return int(math.floor(value + 0.5 + 1e-9))


def _pct_of(observed: float, reference: float) -> int:
    if not reference:
        return 0
    return max(0, min(100, round_half_up(observed / reference * 100)))
