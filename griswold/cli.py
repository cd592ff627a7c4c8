"""
Griswold CLI - Command-line tools for ``.gris`` project files.

Entry point:
    griswold export-cues FILE   - Sample a project into a cue list
    griswold migrate FILE       - Upgrade a project file to the current version
    griswold info FILE          - Summarize a project file
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import get_settings
from .errors import GriswoldError
from .logging_config import configure_logging
from .timeline.cue_sampler import clamp_tick_rate, cue_export_filename, cues_to_json, generate_cues
from .timeline.migration import CURRENT_VERSION, load_gris
from .timeline.project_storage import read_project_text, safe_filename

logger = logging.getLogger('griswold')

# Fix Windows console encoding for unicode characters
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def validate_tick_rate(value: str) -> float:
    """Validate tick rate is a positive number of seconds."""
    try:
        rate = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid tick rate: {value}")

    if not rate > 0:
        raise argparse.ArgumentTypeError(f"Tick rate must be positive, got: {rate}")
    return rate


def validate_duration(value: str) -> float:
    """Validate duration is a non-negative number of seconds."""
    try:
        duration = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid duration: {value}")

    if duration < 0:
        raise argparse.ArgumentTypeError(f"Duration must not be negative, got: {duration}")
    return duration


def validate_project_file(value: str) -> Path:
    """Validate the project file exists."""
    path = Path(value)
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"No such project file: {value}")
    return path


def cmd_export_cues(args) -> int:
    settings = get_settings()
    gris = load_gris(read_project_text(args.file), origin=str(args.file))

    tick_rate = clamp_tick_rate(
        args.tick_rate if args.tick_rate is not None else settings.default_tick_rate,
        low=settings.min_tick_rate,
        high=settings.max_tick_rate,
        default=settings.default_tick_rate,
    )
    if args.tick_rate is not None and tick_rate != args.tick_rate:
        logger.warning(f"Tick rate clamped to {tick_rate}s")

    cues = generate_cues(gris.actors, args.duration, tick_rate)
    output = args.output or args.file.with_name(
        cue_export_filename(safe_filename(gris.project.name))
    )
    Path(output).write_text(cues_to_json(cues, indent=2), encoding="utf-8")

    print(f"Exported {len(cues)} cues for {len(gris.actors)} actors to {output}")
    return 0


def cmd_migrate(args) -> int:
    text = read_project_text(args.file)
    gris = load_gris(text, origin=str(args.file))
    before = json.loads(text).get("version") or 1

    output = Path(args.output) if args.output else args.file
    output.write_text(gris.to_json(indent=2), encoding="utf-8")

    if before == CURRENT_VERSION:
        print(f"{args.file} is already version {CURRENT_VERSION}")
    else:
        print(f"Migrated {args.file} from version {before} to {CURRENT_VERSION} -> {output}")
    return 0


def cmd_info(args) -> int:
    gris = load_gris(read_project_text(args.file), origin=str(args.file))
    size = gris.project.canvas_size

    print(f"Project:     {gris.project.name}")
    print(f"Version:     {gris.version}")
    print(f"Song:        {gris.project.song_filename or '(none)'}")
    print(f"Canvas:      {size.width:g} x {size.height:g}")
    print(f"Backgrounds: {len(gris.backgrounds)}")
    print(f"Actors:      {len(gris.actors)}")
    for actor in gris.actors:
        print(
            f"  - {actor.label or '(unnamed)'}: {len(actor.shapes)} shapes, "
            f"{len(actor.keyframes)} keyframes, {actor.interpolation.value}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="griswold",
        description="Griswold - light choreography project tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  griswold info show.gris
  griswold export-cues show.gris --duration 180 --tick-rate 0.05
  griswold export-cues show.gris -o cues.json     # keyframes only, no audio
  griswold migrate old.gris -o new.gris
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export-cues", help="Sample a project into a JSON cue list")
    export.add_argument("file", type=validate_project_file, help="Project file (.gris)")
    export.add_argument(
        "--tick-rate",
        type=validate_tick_rate,
        default=None,
        help="Seconds between samples (clamped to the configured range)",
    )
    export.add_argument(
        "--duration",
        type=validate_duration,
        default=0.0,
        help="Audio duration in seconds; 0 exports keyframes only (default: 0)",
    )
    export.add_argument("-o", "--output", help="Output path (default: <project>-cues.json)")
    export.set_defaults(func=cmd_export_cues)

    mig = sub.add_parser("migrate", help="Upgrade a project file to the current version")
    mig.add_argument("file", type=validate_project_file, help="Project file (.gris)")
    mig.add_argument("-o", "--output", help="Output path (default: overwrite input)")
    mig.set_defaults(func=cmd_migrate)

    info = sub.add_parser("info", help="Summarize a project file")
    info.add_argument("file", type=validate_project_file, help="Project file (.gris)")
    info.set_defaults(func=cmd_info)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return args.func(args)
    except GriswoldError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
