"""
Print the knockout draw or round-robin fixtures for a roster file.

Usage:
    python src/generate_draw.py data/roster.yaml
    python src/generate_draw.py data/roster.yaml --format ROUND_ROBIN

The roster file is YAML: either a list of entries, or a mapping with
'format' and 'participants' keys. Each entry is a name, or a mapping with
'id', 'name' and an optional 'seed'.
"""
import argparse
import os
import sys
import yaml
from bracket_engine import KNOCKOUT, ROUND_ROBIN, TournamentEngine, TournamentError


def load_roster(file_path):
    """Return (format, participants) from a roster YAML file."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []

    format = None
    if isinstance(data, dict):
        format = data.get('format')
        data = data.get('participants')
    if not isinstance(data, list):
        raise ValueError("expected a list of participants")

    participants = []
    for entry in data:
        if isinstance(entry, dict):
            participants.append(entry)
        else:
            participants.append({'id': str(entry), 'name': str(entry)})
    return format, participants


def preview_draw(participants, format=KNOCKOUT):
    """Build a throwaway in-memory draw and return its view."""
    engine = TournamentEngine()
    engine.create_tournament('preview', 'Preview', format)
    return engine.build_bracket('preview', participants)


def format_view(view):
    lines = []
    for round_data in view['rounds']:
        if lines:
            lines.append('')
        lines.append(f"# {round_data['name']}")
        for match in round_data['matches']:
            if view['format'] == KNOCKOUT:
                first = match['player1']['label']
                second = match['player2']['label']
            else:
                first = match['player1']['name']
                second = match['player2']['name']
            suffix = ''
            if match['status'] == 'BYE' and match['winner']:
                suffix = f"  ({match['winner']['name']} advances)"
            lines.append(f"{match['match_id']}: {first} vs {second}{suffix}")
    return lines


def main(argv=None):
    parser = argparse.ArgumentParser(description='Preview a tournament draw from a roster file')
    parser.add_argument('roster', nargs='?',
                        default=os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'roster.yaml'),
                        help='Roster YAML file')
    parser.add_argument('--format', choices=[KNOCKOUT, ROUND_ROBIN], default=None,
                        help='Tournament format (overrides the roster file)')
    args = parser.parse_args(argv)

    try:
        file_format, participants = load_roster(args.roster)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: cannot read roster {args.roster}: {e}", file=sys.stderr)
        return 1

    try:
        view = preview_draw(participants, args.format or file_format or KNOCKOUT)
    except TournamentError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    for line in format_view(view):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
