"""Tests for G4 storm-similarity scoring."""

from aurora_go.schemas.space_weather import STORM_BASELINE
from aurora_go.services import similarity


def test_baseline_storm_caps_at_99():
    """Every component at 100% plus all bonuses still reports at most 99."""
    b = STORM_BASELINE
    scores, sim = similarity.compute(
        bz=b.bz, speed=b.speed, density=b.density, bt=b.bt,
        pressure=b.pressure, temperature=b.temperature, bz_south_minutes=60,
    )
    assert scores.bz == 100
    assert scores.speed == 100
    assert similarity.weighted_sum(scores) == 100
    assert sim == 99


def test_quiet_conditions_score_low():
    _, sim = similarity.compute(
        bz=2.0, speed=350.0, density=3.0, bt=4.0, pressure=0.6, temperature=50000.0,
    )
    assert 0 <= sim < 30


def test_components_clamped_above_baseline():
    scores = similarity.component_scores(
        bz=-60.0, speed=1500.0, density=80.0, bt=90.0, pressure=40.0, temperature=2_000_000.0,
    )
    assert scores.model_dump() == {
        "bz": 100, "speed": 100, "density": 100, "bt": 100, "pressure": 100, "temperature": 100,
    }


def test_duration_bonus_requires_southward_bz():
    kwargs = dict(bz=-6.0, speed=400.0, density=5.0, bt=7.0, pressure=1.3, temperature=80000.0)
    _, without = similarity.compute(**kwargs, bz_south_minutes=0)
    _, with_duration = similarity.compute(**kwargs, bz_south_minutes=25)
    _, skipped = similarity.compute(**kwargs, bz_south_minutes=None)
    assert with_duration == without + 10
    assert skipped == without


def test_extreme_bz_and_speed_bonuses():
    kwargs = dict(density=5.0, bt=20.0, pressure=2.0, temperature=100000.0, bz_south_minutes=0)
    _, base = similarity.compute(bz=-14.0, speed=590.0, **kwargs)
    _, boosted = similarity.compute(bz=-16.0, speed=610.0, **kwargs)
    # +5 for bz < -15, +5 for speed > 600, plus the slightly larger components
    assert boosted >= base + 10


def test_similarity_range_over_grid():
    for bz in (-40.0, -20.0, -5.0, 0.0, 15.0):
        for speed in (0.0, 300.0, 800.0, 1200.0):
            _, sim = similarity.compute(
                bz=bz, speed=speed, density=10.0, bt=abs(bz), pressure=2.0, temperature=1e5,
                bz_south_minutes=30,
            )
            assert 0 <= sim <= 99


def test_round_half_up():
    assert similarity.round_half_up(2.5) == 3
    assert similarity.round_half_up(3.5) == 4
    assert similarity.round_half_up(2.4999) == 2
    assert similarity.round_half_up(99.99999999999999) == 100
