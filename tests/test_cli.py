"""Tests for the badminton.py command line."""

import json
import sys

import pytest

import badminton


def _run(monkeypatch, *argv) -> int:
    monkeypatch.setattr(sys, 'argv', ['badminton.py', *argv])
    with pytest.raises(SystemExit) as exc:
        badminton.main()
    return exc.value.code


class TestParseCommand:
    """Tests for ``badminton.py parse``."""

    def test_prints_match_json(self, monkeypatch, capsys, data_dir):
        code = _run(
            monkeypatch, 'parse', '--roster', str(data_dir / 'roster.csv'),
            '--date', '2024-03-15', '--author', 'p1',
            'John and Jane beat Bob and Alice 21-18 21-15',
        )
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert [p['id'] for p in data['team1']] == ['p1', 'p2']
        assert [p['id'] for p in data['team2']] == ['p3', 'p4']
        assert data['matchDate'] == '2024-03-15'
        assert data['winner'] == 1
        assert data['createdBy'] == 'p1'

    def test_nothing_parsed(self, monkeypatch, data_dir):
        code = _run(monkeypatch, 'parse', '--roster', str(data_dir / 'roster.csv'), 'hello', 'there')
        assert code == 1

    def test_prompt_only(self, monkeypatch, capsys, data_dir):
        code = _run(monkeypatch, 'parse', '--roster', str(data_dir / 'roster.csv'), '--prompt', 'john beat bob')
        assert code == 0
        assert 'Transcript: "john beat bob"' in capsys.readouterr().out

    def test_saved_llm_response(self, monkeypatch, capsys, data_dir, tmp_path):
        answer = tmp_path / 'answer.json'
        answer.write_text(
            json.dumps({'team1': ['Michael Chen'], 'team2': ['José Ruiz'], 'scores': [[21, 9]]}),
            encoding='utf-8',
        )
        code = _run(
            monkeypatch, 'parse', '--roster', str(data_dir / 'roster.csv'),
            '--llm-response', str(answer), 'michael beat jose',
        )
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data['team2'] == [{'id': 'p5', 'name': 'José Ruiz'}]


class TestLeaderboardCommand:
    """Tests for ``badminton.py leaderboard``."""

    def test_reports_written(self, monkeypatch, data_dir, tmp_path):
        out = tmp_path / 'board.csv'
        code = _run(
            monkeypatch, 'leaderboard',
            '--roster', str(data_dir / 'roster.csv'),
            '--matches', str(data_dir / 'matches.csv'),
            '--buchholz', '--output', str(out), '--html',
        )
        assert code == 0
        assert out.exists()
        assert out.with_suffix('.html').exists()

    def test_summary_printed_without_output(self, monkeypatch, capsys, data_dir):
        code = _run(
            monkeypatch, 'leaderboard',
            '--roster', str(data_dir / 'roster.csv'),
            '--matches', str(data_dir / 'matches.csv'),
        )
        assert code == 0
        assert 'John Doe' in capsys.readouterr().out

    def test_my_matches_requires_player(self, monkeypatch, data_dir):
        code = _run(
            monkeypatch, 'leaderboard',
            '--roster', str(data_dir / 'roster.csv'),
            '--matches', str(data_dir / 'matches.csv'),
            '--period', 'myMatches',
        )
        assert code == 2
