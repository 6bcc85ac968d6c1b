"""Tests for scorebook.filters module."""

from datetime import date

import pytest

from scorebook import Match, Player
from scorebook.filters import filter_matches, get_predicate, one_month_earlier, period_start

# A Friday
TODAY = date(2024, 3, 15)


def _ids(matches) -> list:
    return [m.id for m in matches]


class TestPeriodStart:
    """Tests for period boundaries."""

    def test_last7days(self):
        assert period_start('last7days', TODAY) == date(2024, 3, 8)

    def test_this_week_starts_sunday(self):
        assert period_start('thisWeek', TODAY) == date(2024, 3, 10)

    def test_this_week_on_sunday(self):
        assert period_start('thisWeek', date(2024, 3, 10)) == date(2024, 3, 10)

    def test_this_month(self):
        assert period_start('thisMonth', TODAY) == date(2024, 3, 1)

    def test_last_month(self):
        assert period_start('lastMonth', TODAY) == date(2024, 2, 15)

    def test_all_has_no_start(self):
        assert period_start('all', TODAY) is None

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            period_start('lastYear', TODAY)


class TestOneMonthEarlier:
    """Tests for month arithmetic."""

    def test_clamped_to_month_end(self):
        assert one_month_earlier(date(2024, 3, 31)) == date(2024, 2, 29)

    def test_january(self):
        assert one_month_earlier(date(2024, 1, 20)) == date(2023, 12, 20)


class TestPredicates:
    """Tests against the sample history (2024-03-01 .. 2024-03-08)."""

    def test_all(self, history):
        assert len(filter_matches(history, get_predicate('all', TODAY))) == 4

    def test_last7days(self, history):
        assert _ids(filter_matches(history, get_predicate('last7days', TODAY))) == ['m4']

    def test_this_week(self, history):
        assert filter_matches(history, get_predicate('thisWeek', TODAY)) == []

    def test_this_month(self, history):
        assert len(filter_matches(history, get_predicate('thisMonth', TODAY))) == 4

    def test_my_matches(self, history):
        predicate = get_predicate('myMatches', TODAY, player_id='p5')
        assert _ids(filter_matches(history, predicate)) == ['m3']

    def test_my_matches_requires_player(self):
        with pytest.raises(ValueError):
            get_predicate('myMatches', TODAY)

    def test_undated_match_excluded(self):
        undated = Match(
            id='x', team1=[Player(id='a', name='A')], team2=[],
            team1_scores=[], team2_scores=[], match_date='',
        )
        broken = Match(
            id='y', team1=[], team2=[], team1_scores=[], team2_scores=[],
            match_date='someday',
        )
        predicate = get_predicate('thisMonth', TODAY)
        assert not predicate(undated)
        assert not predicate(broken)
