import pytest

from pricesync.config.errors import ConfigurationError
from pricesync.data_models import ChartPeriod
from pricesync.label_layout import LabelLayoutEngine
from pricesync.label_layout_helpers import (
    LabelFormatter,
    LabelLayoutConfig,
    PeriodLimits,
    font_size_for_width,
    select_indices,
)


@pytest.fixture
def engine():
    return LabelLayoutEngine()


def test_crowded_axis_keeps_ends_and_spreads_middle(engine):
    labels = ["01/01", "01/02", "01/03", "01/04", "01/05"]

    plan = engine.plan(labels, pixel_budget=129, min_spacing_px=8, avg_label_width_px=35, period=ChartPeriod.DAILY)

    assert plan.capacity == 3
    assert plan.visible_texts == ["01/01", "01/03", "01/05"]
    assert plan.rendered_labels() == ["01/01", "", "01/03", "", "01/05"]
    assert [slot.index for slot in plan.slots] == [0, 1, 2, 3, 4]


def test_capacity_is_clamped_per_period(engine):
    assert engine.capacity(10_000, 8, 35, ChartPeriod.DAILY) == 8
    assert engine.capacity(10_000, 8, 35, ChartPeriod.WEEKLY) == 6
    assert engine.capacity(10_000, 8, 35, ChartPeriod.MONTHLY) == 5
    assert engine.capacity(10, 8, 35, ChartPeriod.DAILY) == 3


def test_everything_visible_when_labels_fit(engine):
    plan = engine.plan(["a", "b", "c"], pixel_budget=1_000, min_spacing_px=8, avg_label_width_px=35)

    assert plan.visible_indices == [0, 1, 2]
    assert not plan.compact


def test_empty_and_single_label(engine):
    assert engine.plan([], 200, 8, 35).slots == ()
    single = engine.plan(["2024/01/01"], 200, 8, 35)
    assert single.visible_indices == [0]


def test_compaction_applies_below_threshold(engine):
    labels = ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]

    crowded = engine.plan(labels, pixel_budget=172, min_spacing_px=8, avg_label_width_px=35)
    roomy = engine.plan(labels, pixel_budget=1_000, min_spacing_px=8, avg_label_width_px=35)

    assert crowded.capacity == 4 and crowded.compact
    assert crowded.visible_texts == ["01/01", "01/02", "01/03", "01/04"]
    assert not roomy.compact
    assert roomy.visible_texts == labels


def test_monthly_compaction_shortens_year():
    assert LabelFormatter.compact("2024/03", ChartPeriod.MONTHLY) == "24/03"
    assert LabelFormatter.compact("2024-03-01", ChartPeriod.MONTHLY) == "24/03"
    assert LabelFormatter.compact("03/01", ChartPeriod.DAILY) == "03/01"
    assert LabelFormatter.compact("Q1", ChartPeriod.WEEKLY) == "Q1"


def test_plans_are_deterministic(engine):
    labels = [f"01/{day:02d}" for day in range(1, 31)]

    first = engine.plan(labels, 300, 8, 35)
    second = engine.plan(labels, 300, 8, 35)

    assert first == second
    assert first.visible_indices[0] == 0
    assert first.visible_indices[-1] == 29


@pytest.mark.parametrize(
    ("count", "capacity", "expected"),
    [
        (5, 3, (0, 2, 4)),
        (10, 4, (0, 3, 6, 9)),
        (6, 4, (0, 2, 3, 5)),
        (3, 5, (0, 1, 2)),
        (0, 3, ()),
        (4, 1, (0,)),
    ],
)
def test_select_indices(count, capacity, expected):
    assert select_indices(count, capacity) == expected


def test_visible_count_matches_capacity_and_keeps_ends(engine):
    for count in range(0, 40):
        labels = [str(index) for index in range(count)]
        plan = engine.plan(labels, 200, 8, 35, ChartPeriod.WEEKLY)
        assert len(plan.visible_indices) == min(count, plan.capacity)
        if count >= 2:
            assert plan.visible_indices[0] == 0
            assert plan.visible_indices[-1] == count - 1


def test_invalid_geometry_rejected(engine):
    with pytest.raises(ConfigurationError):
        engine.plan(["a"], 0, 8, 35)
    with pytest.raises(ConfigurationError):
        engine.plan(["a"], 100, -1, 35)
    with pytest.raises(ConfigurationError):
        engine.plan(["a"], 100, 8, 0)


def test_plan_for_chart_uses_padding_and_font_tiers(engine):
    labels = [f"01/{day:02d}" for day in range(1, 31)]

    plan = engine.plan_for_chart(labels, ChartPeriod.DAILY, chart_width_px=360)

    # 360 - 30 - 50 = 280 px -> floor(280 / 43) = 6 labels
    assert plan.capacity == 6
    assert plan.font_size == 11
    assert font_size_for_width(320) == 10
    assert font_size_for_width(400) == 12


def test_config_validation():
    with pytest.raises(ConfigurationError):
        LabelLayoutConfig(label_width_px=0)
    with pytest.raises(ConfigurationError):
        LabelLayoutConfig(period_limits={ChartPeriod.DAILY: PeriodLimits(3, 8, 6)})
    with pytest.raises(ConfigurationError):
        LabelLayoutConfig(
            period_limits={
                ChartPeriod.DAILY: PeriodLimits(1, 8, 6),
                ChartPeriod.WEEKLY: PeriodLimits(3, 6, 5),
                ChartPeriod.MONTHLY: PeriodLimits(3, 5, 6),
            }
        )
