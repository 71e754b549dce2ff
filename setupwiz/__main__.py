"""
Main CLI entry point for setupwiz.

Provides subcommands to preview a tier's derived settings, apply wizard
choices to a configuration file, and diff two configuration texts.
"""

import argparse
import sys
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from setupwiz.logging import configure_logging_from_args, get_logger

DRAFT_TEXT_CHOICES = {
    "tier": ("extreme-low", "low", "medium", "good"),
    "profile": ("light", "heavy"),
    "captcha_mode": ("memory", "balanced", "throughput"),
    "database": ("postgres", "sqlite"),
}


def _add_choice_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--tier", choices=DRAFT_TEXT_CHOICES["tier"], help="Performance tier")
    parser.add_argument("--profile", choices=DRAFT_TEXT_CHOICES["profile"], help="Load profile")
    parser.add_argument(
        "--captcha-mode",
        choices=DRAFT_TEXT_CHOICES["captcha_mode"],
        help="Captcha preheat mode",
    )
    parser.add_argument("--database", choices=DRAFT_TEXT_CHOICES["database"], help="Database kind")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the main argument parser with subcommands.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="setupwiz",
        description="setupwiz - derive a complete system configuration from a few high-level choices",
        epilog="Use 'setupwiz <command> --help' for more information on a specific command.",
    )

    # Global flags (available to all commands)
    parser.add_argument(
        "--settings",
        type=Path,
        help="Path to engine settings file (.json, .yaml, or .yml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (overrides --verbose)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands",
        required=True,
    )

    preview_parser = subparsers.add_parser(
        "preview",
        help="Show the settings a tier would write",
        description="Print every owned path and value the wizard would write, with group counts.",
    )
    _add_choice_options(preview_parser)
    preview_parser.add_argument(
        "--summary",
        action="store_true",
        help="Print summary cards instead of every path",
    )

    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply wizard choices to a configuration file",
        description="Load a configuration, apply the wizard draft and write the result.",
    )
    apply_parser.add_argument("config", type=Path, help="Configuration file to read")
    _add_choice_options(apply_parser)
    apply_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Set a draft field (repeatable), e.g. --set cache_use_tls=true",
    )
    apply_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the result here instead of stdout",
    )

    diff_parser = subparsers.add_parser(
        "diff",
        help="Line diff statistics between two files",
    )
    diff_parser.add_argument("old", type=Path, help="Saved configuration")
    diff_parser.add_argument("new", type=Path, help="Pending configuration")

    return parser


def parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    """
    Parse ``FIELD=VALUE`` pairs into draft changes.

    Boolean draft fields accept true/false, yes/no, on/off and 1/0; every
    other field keeps the text as given.

    Raises:
        ValueError: For malformed pairs, unknown fields or bad booleans
    """
    from setupwiz.mapping.draft import Draft

    field_types = {f.name: f.type for f in fields(Draft)}
    changes: Dict[str, Any] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected FIELD=VALUE, got '{assignment}'")
        if name not in field_types:
            raise ValueError(f"Unknown draft field: {name}")
        if field_types[name] in ("bool", bool):
            lowered = value.strip().lower()
            if lowered in {"true", "yes", "on", "1"}:
                changes[name] = True
            elif lowered in {"false", "no", "off", "0"}:
                changes[name] = False
            else:
                raise ValueError(f"Expected a boolean for {name}, got '{value}'")
        else:
            changes[name] = value
    return changes


def _choice_changes(args: argparse.Namespace) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    if args.profile:
        changes["load_profile"] = args.profile
    if args.captcha_mode:
        changes["captcha_preheat_mode"] = args.captcha_mode
    if args.database:
        changes["database_type"] = args.database
    return changes


def run_preview(args: argparse.Namespace, settings) -> int:
    from setupwiz.mapping.draft import DEFAULT_DRAFT, select_performance_tier, update_draft
    from setupwiz.presets.resolver import recommended_allocator_policy
    from setupwiz.preview import build_preview_group_stats, build_preview_items, build_preview_summary

    policy = recommended_allocator_policy(settings.runtime_os)
    draft = select_performance_tier(DEFAULT_DRAFT, args.tier or settings.default_tier)
    changes = {"load_profile": settings.default_load_profile}
    changes.update(_choice_changes(args))
    draft = replace(update_draft(draft, **changes), allocator_policy=policy)

    if args.summary:
        for card in build_preview_summary(draft):
            print(f"{card.label}: {card.value}")
        return 0

    items = build_preview_items(draft, policy)
    for item in items:
        print(f"{item.path} = {item.value}")
    print()
    for stat in build_preview_group_stats(items):
        print(f"{stat.label} ({stat.key}): {stat.count}")
    return 0


def run_apply(args: argparse.Namespace, settings) -> int:
    from setupwiz.codecs.text import codec_for_path, get_codec
    from setupwiz.controller import ReconciliationController, WizardState

    logger = get_logger(__name__)
    config_path = Path(args.config).expanduser()
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        codec = codec_for_path(config_path)
    except ValueError:
        logger.info(f"Unknown suffix for {config_path}; using {settings.text_format}")
        codec = get_codec(settings.text_format)

    original = config_path.read_text(encoding="utf-8")
    controller = ReconciliationController(codec, runtime_os=settings.runtime_os)
    if controller.open(original) == WizardState.ERROR:
        print(f"Error: {controller.parse_error}", file=sys.stderr)
        return 1

    changes = _choice_changes(args)
    changes.update(parse_assignments(args.assignments))
    if args.tier:
        controller.select_tier(args.tier)
    result = controller.edit(**changes)

    if args.output:
        Path(args.output).expanduser().write_text(result, encoding="utf-8")
        logger.info(f"Wrote configuration to {args.output}")
    else:
        sys.stdout.write(result)

    stats = controller.diff_against(original)
    print(
        f"changed: {stats.changed}, added: {stats.added}, removed: {stats.removed}",
        file=sys.stderr,
    )
    return 0


def run_diff(args: argparse.Namespace) -> int:
    from setupwiz.preview.diff import calculate_line_diff_stats

    for path in (args.old, args.new):
        if not Path(path).exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
    stats = calculate_line_diff_stats(
        Path(args.old).read_text(encoding="utf-8"),
        Path(args.new).read_text(encoding="utf-8"),
    )
    print(f"changed: {stats.changed}, added: {stats.added}, removed: {stats.removed}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the setupwiz CLI.

    Args:
        argv: Command-line arguments (for testing)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = get_logger(__name__)

    try:
        from setupwiz.config import load_settings

        settings = load_settings(args.settings)
        configure_logging_from_args(
            verbose=args.verbose,
            log_level=args.log_level,
            log_file=str(args.log_file or settings.log_file or "") or None,
            default_level=settings.log_level,
        )
        logger.debug(f"Parsed arguments: {args}")

        if args.command == "preview":
            return run_preview(args, settings)
        if args.command == "apply":
            return run_apply(args, settings)
        if args.command == "diff":
            return run_diff(args)

        parser.print_help()
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\nInterrupted by user.")
        return 130  # Standard exit code for SIGINT

    except Exception as e:
        logger.exception("Unhandled exception in main")
        print(f"\nError: {e}", file=sys.stderr)
        if args.verbose:
            raise
        return 1


if __name__ == "__main__":
    sys.exit(main())
