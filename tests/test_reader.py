"""Tests for scorebook.reader module."""

import pytest

from scorebook import Player
from scorebook.reader import (
    detect_encoding,
    normalize_whitespace,
    parse_set_scores,
    read_matches,
    read_roster,
)


class TestDetectEncoding:
    """Tests for encoding detection."""

    def test_utf16le_bom(self, tmp_path):
        f = tmp_path / 'roster.csv'
        f.write_bytes(b'\xff\xfe' + 'ID\tName\np1\tJohn\n'.encode('utf-16-le'))
        assert detect_encoding(f) == 'utf-16-le'

    def test_utf8_fallback(self, data_dir):
        assert detect_encoding(data_dir / 'roster.csv') == 'utf-8-sig'


class TestNormalizeWhitespace:
    """Tests for whitespace normalization."""

    def test_strips_leading_trailing(self):
        assert normalize_whitespace('  hello  ') == 'hello'

    def test_collapses_multiple_spaces(self):
        assert normalize_whitespace('  Jane  Smith ') == 'Jane Smith'

    def test_unicode_whitespace(self):
        # U+2006 = Six-Per-Em Space
        assert normalize_whitespace('a\u2006b') == 'a b'


class TestReadRoster:
    """Tests for reading the roster."""

    def test_count_skips_rows_without_id(self, roster):
        assert len(roster) == 6

    def test_first_player(self, roster):
        p = roster[0]
        assert isinstance(p, Player)
        assert p.id == 'p1'
        assert p.name == 'John Doe'
        assert p.email == 'john@example.com'
        assert p.groups == ('Tuesday', 'Club')

    def test_optional_fields_empty(self, roster):
        bob = roster[2]
        assert bob.email is None

    def test_special_characters_preserved(self, roster):
        assert 'José Ruiz' in {p.name for p in roster}

    def test_utf16_file(self, tmp_path):
        f = tmp_path / 'roster.csv'
        f.write_bytes(b'\xff\xfe' + 'ID\tName\np1\tJürgen\n'.encode('utf-16-le'))
        assert read_roster(f) == [Player(id='p1', name='Jürgen')]

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            read_roster('nonexistent.csv')

    def test_missing_columns_raises(self, tmp_path):
        f = tmp_path / 'bad.csv'
        f.write_text('Col1\tCol2\na\tb\n', encoding='utf-8')
        with pytest.raises(ValueError, match='Fehlende Spalten'):
            read_roster(f)

    def test_empty_file_raises(self, tmp_path):
        f = tmp_path / 'empty.csv'
        f.write_text('', encoding='utf-8')
        with pytest.raises(ValueError, match='leer'):
            read_roster(f)


class TestParseSetScores:
    """Tests for the scores cell."""

    def test_multiple_sets(self):
        assert parse_set_scores('21-18 15-21 21-19') == ([21, 15, 21], [18, 21, 19])

    def test_colon_and_comma(self):
        assert parse_set_scores('21:18, 21:15') == ([21, 21], [18, 15])

    def test_empty_cell(self):
        assert parse_set_scores('') == ([], [])

    def test_invalid_set_raises(self):
        with pytest.raises(ValueError):
            parse_set_scores('21-x')


class TestReadMatches:
    """Tests for reading the match history."""

    def test_unreadable_rows_skipped(self, history):
        assert [m.id for m in history] == ['m1', 'm2', 'm3', 'm4']

    def test_doubles_row(self, history):
        m = history[0]
        assert [p.id for p in m.team1] == ['p1', 'p2']
        assert [p.id for p in m.team2] == ['p3', 'p4']
        assert m.team1_scores == [21, 15, 21]
        assert m.team2_scores == [18, 21, 19]
        assert m.match_date == '2024-03-01'
        assert m.created_by == 'p1'

    def test_blank_winner_derived(self, history):
        assert history[0].winner == 1
        assert history[3].winner == 0

    def test_explicit_winner_kept(self, history):
        assert history[2].winner == 2

    def test_invalid_winner_skipped(self, tmp_path, roster):
        f = tmp_path / 'matches.csv'
        f.write_text(
            'ID\tDate\tTeam 1\tTeam 2\tScores\tWinner\n'
            'x1\t2024-03-01\tp1\tp2\t21-10\t5\n',
            encoding='utf-8',
        )
        assert read_matches(f, roster) == []

    def test_missing_columns_raises(self, tmp_path, roster):
        f = tmp_path / 'bad.csv'
        f.write_text('ID\tDate\n1\t2024-03-01\n', encoding='utf-8')
        with pytest.raises(ValueError, match='Fehlende Spalten'):
            read_matches(f, roster)
