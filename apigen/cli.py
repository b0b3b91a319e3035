"""Command-line entry point.

Usage::

    apigen --name FooApi --kestrel-port 6002 --iis-port 6001 --iis-https-port 44362 --provider p
    apigen --answers answers.json -o ./FooApi
    python -m apigen --answers answers.json --no-update-check
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

from pydantic import ValidationError

from apigen import __version__
from apigen.config import GeneratorConfig
from apigen.materializer import AnswerSet, MaterializeError, Materializer
from apigen.updates import check_for_update
from apigen.utils import (
    format_duration,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apigen",
        description="Generate an ASP.NET Core web-API starter solution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  apigen --name FooApi --kestrel-port 6002 --iis-port 6001 --iis-https-port 44362\n"
            "  apigen --answers answers.json --provider ms --keep\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    answers = parser.add_argument_group("answers")
    answers.add_argument("--answers", type=Path, help="JSON file with the answers")
    answers.add_argument("--name", dest="project_name", help='Project name, PascalCase (e.g. "MyProjectApi")')
    answers.add_argument("--kestrel-port", dest="kestrel_http_port", help="HTTP port of the kestrel server")
    answers.add_argument("--iis-port", dest="iis_http_port", help="HTTP port of the IIS Express server")
    answers.add_argument("--iis-https-port", dest="iis_https_port", help="HTTPS port of the IIS Express server")
    answers.add_argument(
        "--provider",
        dest="data_provider",
        help="Data provider: p (PostgreSQL), ms (MSSQL) or n (none); default p",
    )
    delete = answers.add_mutually_exclusive_group()
    delete.add_argument(
        "--delete",
        dest="delete_content",
        action="store_const",
        const=True,
        help="Empty the output directory first, keeping .git (default)",
    )
    delete.add_argument(
        "--keep",
        dest="delete_content",
        action="store_const",
        const=False,
        help="Write over the output directory without emptying it",
    )

    parser.add_argument("--output", "-o", type=Path, default=None, help="Output directory (default: cwd)")
    parser.add_argument("--template", type=Path, default=None, help="Template directory (default: bundled)")
    parser.add_argument("--config", type=Path, default=None, help="Generator settings JSON file")
    parser.add_argument(
        "--strict-provider",
        action="store_true",
        help="Fail on an unknown data provider instead of generating without one",
    )
    parser.add_argument("--no-update-check", action="store_true", help="Skip the update check")
    parser.add_argument("--verbose", "-v", action="store_true", default=None, help="List every file written")
    return parser


def load_config(args: argparse.Namespace) -> GeneratorConfig:
    """Settings from ``--config`` or the environment, overridden by flags."""
    overrides = {
        "output_dir": args.output,
        "template_dir": args.template,
        "check_updates": False if args.no_update_check else None,
        "verbose": args.verbose,
    }
    if args.config is not None:
        config = GeneratorConfig.load(args.config)
        return config.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    return GeneratorConfig.from_env(**overrides)


def collect_answers(args: argparse.Namespace) -> AnswerSet:
    return AnswerSet.collect(
        args.answers,
        project_name=args.project_name,
        kestrel_http_port=args.kestrel_http_port,
        iis_http_port=args.iis_http_port,
        iis_https_port=args.iis_https_port,
        data_provider=args.data_provider,
        delete_content=args.delete_content,
    )


async def run(config: GeneratorConfig, answers: AnswerSet, *, strict_provider: bool = False) -> int:
    """Check for updates, then materialize.  Returns the process exit status."""
    if config.check_updates:
        info = await check_for_update(__version__, config)
        if info.update_available:
            print_warning(
                f"apigen {info.latest} is available (you have {info.current}). "
                "Upgrade with `pip install -U apigen` or rerun with --no-update-check."
            )
            return 1

    started = time.monotonic()
    materializer = Materializer(
        config.template_dir,
        config.output_dir,
        answers,
        strict_provider=strict_provider,
        verbose=config.verbose,
    )
    result = await materializer.materialize()

    print_summary_table(
        {
            "Project": answers.project_name,
            "Data provider": result.variant,
            "Kestrel HTTP": str(answers.kestrel_http_port),
            "IIS HTTP / HTTPS": f"{answers.iis_http_port} / {answers.iis_https_port}",
            "Files written": str(len(result.written)),
            "Files skipped": str(len(result.skipped)),
            "Output": str(result.destination),
        },
        title="Generation summary",
    )
    print_success(f"Project {answers.project_name} generated in {format_duration(time.monotonic() - started)}.")
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``apigen`` and ``python -m apigen``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    print_banner("apigen", __version__)

    try:
        config = load_config(args)
        answers = collect_answers(args)
    except ValidationError as exc:
        print_error(f"Invalid input:\n{exc}")
        sys.exit(1)
    except (OSError, ValueError) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    try:
        status = asyncio.run(run(config, answers, strict_provider=args.strict_provider))
    except MaterializeError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
