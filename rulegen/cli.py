"""Generate alert-rule documents from environment profiles and templates."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rulegen.core.config import Settings, get_settings
from rulegen.core.factory import ComponentFactory
from rulegen.core.logging_config import get_logger, setup_logging
from rulegen.interfaces.generator import DuplicateRuleError
from rulegen.interfaces.profile_store import ConfigError, ProfileNotFoundError
from rulegen.interfaces.template_set import TemplateError
from rulegen.pipeline import run_generation
from rulegen.strategies.generator.models import GenerationReport

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_ABORTED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rulegen", description=__doc__)
    parser.add_argument("--profiles", type=Path, help="Profiles directory")
    parser.add_argument("--templates", type=Path, help="Templates root directory")
    parser.add_argument("--glob", dest="template_glob", help="Fragment glob below the templates root")
    parser.add_argument("--output", type=Path, help="Output directory")
    parser.add_argument("--writer", choices=("grafana", "prometheus"), help="Output format")
    parser.add_argument(
        "--profile",
        dest="only",
        action="append",
        metavar="NAME",
        help="Only generate for this profile (repeatable)",
    )
    parser.add_argument("--check", action="store_true", help="Validate without writing files")
    parser.add_argument("--strict", action="store_true", help="Abort on the first bad profile or fragment")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "profiles_dir": args.profiles,
        "templates_dir": args.templates,
        "template_glob": args.template_glob,
        "output_dir": args.output,
        "writer_type": args.writer,
    }
    return get_settings().model_copy(
        update={key: value for key, value in overrides.items() if value is not None}
    )


def _print_report(report: GenerationReport) -> None:
    counts = report.summary()
    print(
        f"generated={counts['generated']} failed={counts['failed']} "
        f"skipped={counts['skipped']}"
    )
    for outcome in report.skipped:
        print(f"  skipped  {outcome.profile} (disabled)")
    for outcome in report.failed:
        print(f"  failed   {outcome.profile}/{outcome.fragment}: {outcome.error}")
    for error in report.profile_errors:
        print(f"  profile  {error}")
    for error in report.template_errors:
        print(f"  template {error}")
    for overlap in report.overlaps:
        print(
            f"  overlap  {overlap.key}={overlap.value} shared by {', '.join(overlap.profiles)}"
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = _settings_from_args(args)
    setup_logging(settings)

    factory = ComponentFactory(settings)
    try:
        writer = factory.get_writer()
        run = asyncio.run(
            run_generation(
                factory,
                strict=args.strict,
                only=args.only,
            )
        )
    except DuplicateRuleError as exc:
        print("aborted: generated rules would overwrite each other", file=sys.stderr)
        for conflict in exc.conflicts:
            print(f"  {conflict}", file=sys.stderr)
        return EXIT_ABORTED
    except (ConfigError, TemplateError, ValueError) as exc:
        print(f"aborted: {exc}", file=sys.stderr)
        return EXIT_ABORTED
    except ProfileNotFoundError as exc:
        print(f"aborted: unknown profile {exc}", file=sys.stderr)
        return EXIT_ABORTED

    _print_report(run.report)

    if not args.check:
        for path in writer.write(run.rules, run.profiles, settings.output_dir):
            print(f"wrote {path}")

    if not run.report.ok:
        logger.warning("Generation finished with errors")
        return EXIT_PARTIAL
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
