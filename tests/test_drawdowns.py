from datetime import date

import pytest

from portfolio_analytics.exceptions import InvalidParameterError
from portfolio_analytics.performance.drawdowns import (
    DrawdownSegmenter,
    max_drawdown,
    max_gain,
)


def test_max_drawdown_and_gain() -> None:
    assert max_drawdown([100, 120, 90, 130]) == pytest.approx(25.0)
    assert max_gain([100, 80, 120, 110]) == pytest.approx(50.0)
    assert max_drawdown([]) == 0.0
    assert max_gain([5.0]) == 0.0


def test_two_episodes_sorted_by_severity(make_series) -> None:
    series = make_series([100, 95, 97, 101, 100.5, 90, 92])
    episodes = DrawdownSegmenter().segment(series)

    assert len(episodes) == 2
    deepest, recovered = episodes

    assert deepest.max_drawdown_pct == pytest.approx(11 / 101 * 100)
    assert deepest.start_date == date(2025, 1, 4)
    assert deepest.end_date == date(2025, 1, 7)
    assert deepest.duration_days == 3
    assert not deepest.recovered

    assert recovered.max_drawdown_pct == pytest.approx(5.0)
    assert recovered.start_date == date(2025, 1, 1)
    assert recovered.end_date == date(2025, 1, 3)
    assert recovered.duration_days == 2
    assert recovered.recovered


def test_episodes_do_not_overlap(make_series) -> None:
    values = [100, 96, 102, 99, 94, 104, 103, 90, 95, 106, 105, 101]
    episodes = DrawdownSegmenter().segment(make_series(values))

    assert len(episodes) == 4
    severities = [e.max_drawdown_pct for e in episodes]
    assert severities == sorted(severities, reverse=True)

    chronological = sorted(episodes, key=lambda e: e.start_date)
    for prev, nxt in zip(chronological, chronological[1:]):
        assert prev.end_date < nxt.start_date


def test_steady_decline_is_one_open_episode(make_series) -> None:
    episodes = DrawdownSegmenter().segment(make_series([100, 90, 80]))

    assert len(episodes) == 1
    assert episodes[0].max_drawdown_pct == pytest.approx(20.0)
    assert episodes[0].recovered is False


def test_rising_series_has_no_episodes(make_series) -> None:
    assert DrawdownSegmenter().segment(make_series([100, 101, 105, 110])) == []


def test_threshold_filters_shallow_dips(make_series) -> None:
    series = make_series([100, 99.5, 101])

    assert DrawdownSegmenter(threshold_pct=1.0).segment(series) == []
    shallow = DrawdownSegmenter(threshold_pct=0.1).segment(series)
    assert len(shallow) == 1
    assert shallow[0].max_drawdown_pct == pytest.approx(0.5)


def test_unsorted_input_is_ordered(make_series) -> None:
    series = make_series([100, 90, 105])
    episodes = DrawdownSegmenter().segment(list(reversed(series)))

    assert len(episodes) == 1
    assert episodes[0].recovered


def test_short_series_and_bad_threshold(make_series) -> None:
    assert DrawdownSegmenter().segment(make_series([100])) == []
    with pytest.raises(InvalidParameterError):
        DrawdownSegmenter(threshold_pct=-1)


def test_to_dict_uses_iso_dates(make_series) -> None:
    episode = DrawdownSegmenter().segment(make_series([100, 90]))[0]
    data = episode.to_dict()

    assert data["start_date"] == "2025-01-01"
    assert data["end_date"] == "2025-01-02"
