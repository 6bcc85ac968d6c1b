"""Report generation for leaderboards (CSV, HTML, summary) and match export."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from scorebook import Match, Player, PlayerStat
from scorebook.scoring import win_percentage

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / 'templates'

CSV_COLUMNS = [
    'Rank',
    'Player',
    'Points',
    'Buchholz',
    'Played',
    'Won',
    'Win %',
]


def _stat_to_row(rank: int, stat: PlayerStat) -> dict:
    """Convert a PlayerStat to a flat dict for CSV/HTML output."""
    return {
        'Rank': str(rank),
        'Player': stat.player.name,
        'Points': f'{stat.points:.2f}',
        'Buchholz': f'{stat.opponent_points_sum:g}',
        'Played': str(stat.played),
        'Won': str(stat.won),
        'Win %': f'{win_percentage(stat):.1f}',
    }


def write_csv_report(stats: list[PlayerStat], output_path: Path) -> None:
    """Write a leaderboard as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with German Excel.

    Args:
        stats: Leaderboard rows in ranking order.
        output_path: Path for the output CSV file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for rank, stat in enumerate(stats, start=1):
            writer.writerow(_stat_to_row(rank, stat))

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, len(stats))


def write_html_report(
    stats: list[PlayerStat],
    output_path: Path,
    title: str = '',
    buchholz_enabled: bool = False,
) -> None:
    """Write a leaderboard as an HTML report using Jinja2.

    Args:
        stats: Leaderboard rows in ranking order.
        output_path: Path for the output HTML file.
        title: Report heading, e.g. the selected period.
        buchholz_enabled: Shown in the heading so readers know how points were computed.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('leaderboard.html')

    rows = [_stat_to_row(rank, s) for rank, s in enumerate(stats, start=1)]

    html = template.render(
        title=title,
        rows=rows,
        columns=CSV_COLUMNS,
        buchholz_enabled=buchholz_enabled,
        total_played=sum(s.played for s in stats),
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def print_summary(stats: list[PlayerStat], title: str = '') -> None:
    """Print the leaderboard as a plain table to stdout."""
    print(f"\n=== Rangliste: {title} ===")
    if not stats:
        print("Noch keine Spiele erfasst.")
        print()
        return

    width = max(len(s.player.name) for s in stats)
    print(f"{'#':>3}  {'Spieler':<{width}}  {'Punkte':>8}  {'Buchholz':>8}  "
          f"{'Sp.':>4}  {'Siege':>5}  {'Quote':>6}")
    for rank, stat in enumerate(stats, start=1):
        print(
            f"{rank:>3}  {stat.player.name:<{width}}  {stat.points:>8.2f}  "
            f"{stat.opponent_points_sum:>8g}  {stat.played:>4}  {stat.won:>5}  "
            f"{win_percentage(stat):>5.1f}%"
        )
    print()


def _player_to_dict(player: Player) -> dict:
    return {'id': player.id, 'name': player.name}


def match_to_dict(match: Match) -> dict:
    """JSON-ready representation of a match record."""
    return {
        'id': match.id,
        'team1': [_player_to_dict(p) for p in match.team1],
        'team2': [_player_to_dict(p) for p in match.team2],
        'team1Scores': list(match.team1_scores),
        'team2Scores': list(match.team2_scores),
        'matchDate': match.match_date,
        'winner': match.winner,
        'createdTs': match.created_ts,
        'createdBy': match.created_by,
    }
