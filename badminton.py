"""badminton-scorebook – CLI zum Erfassen von Badminton-Ergebnissen und Ranglisten."""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path

from scorebook import ScoringConfig
from scorebook.assistant import build_prompt, decode_response
from scorebook.filters import PERIODS, filter_matches, get_predicate
from scorebook.leaderboard import aggregate
from scorebook.reader import read_matches, read_roster
from scorebook.reporter import match_to_dict, print_summary, write_csv_report, write_html_report
from scorebook.scoring import DEFAULT_BUCHHOLZ_WEIGHT
from scorebook.transcript import parse_transcript


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Kein gueltiges Datum (YYYY-MM-DD): {value}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Badminton-Ergebnisse aus Sprache/Text erfassen und Ranglisten berechnen.',
        prog='badminton.py',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    parse_cmd = sub.add_parser('parse', help='Ein gesprochenes Ergebnis auswerten')
    parse_cmd.add_argument(
        'transcript', nargs='+',
        help='Transkript, z.B. "John and Jane beat Bob and Alice 21-18 21-15"',
    )
    parse_cmd.add_argument(
        '--roster', required=True, type=Path,
        help='Pfad zur Spielerliste (CSV)',
    )
    parse_cmd.add_argument(
        '--author', default='',
        help='ID des erfassenden Benutzers',
    )
    parse_cmd.add_argument(
        '--date', type=_iso_date,
        help='Bezugsdatum fuer "today"/"yesterday" (Standard: heute)',
    )
    source = parse_cmd.add_mutually_exclusive_group()
    source.add_argument(
        '--prompt', action='store_true',
        help='Nur den Prompt fuer den Textdienst ausgeben',
    )
    source.add_argument(
        '--llm-response', type=Path,
        help='Gespeicherte Antwort des Textdienstes statt Regel-Parser verwenden',
    )

    board = sub.add_parser('leaderboard', help='Rangliste berechnen')
    board.add_argument(
        '--roster', required=True, type=Path,
        help='Pfad zur Spielerliste (CSV)',
    )
    board.add_argument(
        '--matches', required=True, type=Path,
        help='Pfad zur Spielhistorie (CSV)',
    )
    board.add_argument(
        '--period', choices=PERIODS, default='all',
        help='Zeitraum der Rangliste (Standard: all)',
    )
    board.add_argument(
        '--player',
        help='Spieler-ID fuer --period myMatches',
    )
    board.add_argument(
        '--buchholz', action='store_true',
        help='Buchholz-Wertung einrechnen',
    )
    board.add_argument(
        '--buchholz-weight', type=float, default=DEFAULT_BUCHHOLZ_WEIGHT,
        help=f'Gewicht der Buchholz-Wertung (Standard: {DEFAULT_BUCHHOLZ_WEIGHT})',
    )
    board.add_argument('--win-points', type=float, default=3, help='Punkte fuer einen Sieg')
    board.add_argument('--draw-points', type=float, default=1, help='Punkte fuer ein Unentschieden')
    board.add_argument('--loss-points', type=float, default=0, help='Punkte fuer eine Niederlage')
    board.add_argument(
        '--output', type=Path,
        help='Pfad fuer die Report-Ausgabe (CSV)',
    )
    board.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    board.add_argument(
        '--summary', action='store_true',
        help='Rangliste auf stdout ausgeben',
    )
    return parser


def run_parse(args: argparse.Namespace) -> int:
    """Parse one transcript and print the match as JSON."""
    transcript = ' '.join(args.transcript)
    roster = read_roster(args.roster)

    if args.prompt:
        print(build_prompt(transcript, roster))
        return 0

    now = datetime.now()
    if args.date:
        now = datetime.combine(args.date, now.time())

    if args.llm_response:
        text = args.llm_response.read_text(encoding='utf-8')
        match = decode_response(text, roster, args.author, now)
    else:
        match = parse_transcript(transcript, roster, args.author, now)

    if match is None:
        logging.error("Aus dem Transkript konnte kein Spiel erkannt werden.")
        return 1

    print(json.dumps(match_to_dict(match), indent=2, ensure_ascii=False))
    return 0


def run_leaderboard(args: argparse.Namespace) -> int:
    """Compute the leaderboard and write the requested reports."""
    roster = read_roster(args.roster)
    matches = read_matches(args.matches, roster)

    predicate = get_predicate(args.period, player_id=args.player)
    matches = filter_matches(matches, predicate)

    config = ScoringConfig(
        win_points=args.win_points,
        draw_points=args.draw_points,
        loss_points=args.loss_points,
        buchholz_weight=args.buchholz_weight,
    )
    stats = aggregate(matches, config, args.buchholz)

    if args.output:
        write_csv_report(stats, args.output)
        if args.html:
            html_path = args.output.with_suffix('.html')
            write_html_report(stats, html_path, args.period, args.buchholz)

    if args.summary or not args.output:
        print_summary(stats, args.period)
    return 0


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args()

    if args.command == 'leaderboard':
        if args.period == 'myMatches' and not args.player:
            parser.error('--player ist erforderlich bei Verwendung von --period myMatches.')
        if args.html and not args.output:
            parser.error('--output ist erforderlich bei Verwendung von --html.')
        sys.exit(run_leaderboard(args))

    sys.exit(run_parse(args))


if __name__ == '__main__':
    main()
