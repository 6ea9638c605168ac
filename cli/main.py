"""Command line interface for running config-drill scenarios."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from configdrill.clients import ClientPool
from configdrill.engine import Engine
from configdrill.models import BatchResult, SweepResult
from configdrill.reports import load_result, write_csv, write_json
from configdrill.settings import Settings, load_settings
from configdrill.sweep import sweep

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logger = logging.getLogger("configdrill.cli")


def load_environment(env_file: Optional[Path] = None) -> None:
    """Populate os.environ from a .env file without overriding variables already set."""
    if env_file is not None:
        if not env_file.exists():
            raise FileNotFoundError(env_file)
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)


def build_settings(keep: bool = False) -> Settings:
    settings = load_settings()
    if keep:
        settings.keep_resources = True
    configure_logging(settings.log_level)
    return settings


def _registry() -> Dict[str, Any]:
    from scenarios.registry import SCENARIO_REGISTRY

    return SCENARIO_REGISTRY


def select_rules(
    rules: Sequence[str],
    *,
    run_all: bool = False,
    service: Optional[str] = None,
    registry: Optional[Dict[str, Any]] = None,
) -> List[str]:
    """Resolve the scenarios a run should execute."""
    registry = registry if registry is not None else _registry()
    if run_all:
        selected = list(registry)
    elif rules:
        selected = [rule.strip().lower() for rule in rules if rule.strip()]
    elif service:
        selected = list(registry)
    else:
        raise ValueError("Specify one or more rule names, --all or --service")

    if service:
        wanted = service.strip().lower()
        selected = [rule for rule in selected if rule in registry and registry[rule].META.get("service") == wanted]
    unknown = [rule for rule in selected if rule not in registry]
    for rule in unknown:
        logger.warning("Unknown scenario: %s", rule)
    known = [rule for rule in selected if rule in registry]
    if not known:
        raise ValueError("No known scenarios selected; use 'list' to see them")
    return known


def run_drill(
    rules: Sequence[str],
    *,
    run_all: bool = False,
    service: Optional[str] = None,
    keep: bool = False,
    fmt: Optional[str] = None,
    output_path: Optional[Path] = None,
) -> BatchResult:
    """Run scenarios and optionally write a report."""
    settings = build_settings(keep=keep)
    # fail before any client is built
    settings.require_credentials()
    selected = select_rules(rules, run_all=run_all, service=service)
    engine = Engine(settings)
    result = engine.run(selected)

    for scenario in result.results:
        line = f"{scenario.status:<14} {scenario.rule} ({scenario.duration_seconds}s)"
        if scenario.error:
            line += f" - {scenario.error}"
        print(line)

    if fmt or output_path:
        fmt = fmt or (output_path.suffix.lstrip(".") if output_path else "json")
        output_path = output_path or Path(f"config-drill-report.{fmt}")
        if fmt == "json":
            write_json(result, output_path)
        elif fmt == "csv":
            write_csv(result, output_path)
        else:
            raise ValueError(f"Unsupported format {fmt}")
        print(f"Wrote config-drill {fmt.upper()} report to {output_path}")
    return result


def run_sweep(tag_key: Optional[str], apply_changes: bool) -> List[SweepResult]:
    settings = build_settings()
    settings.require_credentials()
    results = sweep(settings, ClientPool(settings), apply_changes=apply_changes, tag_key=tag_key)
    if not results:
        print(f"No resources tagged {tag_key or settings.tag_key}.")
        return results

    _print_table(
        ["Mode", "Service", "Type", "Resource", "Message"],
        [[item.mode, item.service, item.resource_type, item.resource_id, item.message] for item in results],
    )
    if not apply_changes:
        print("Dry run only; re-run with --apply to delete.")
    return results


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="config-drill")
    parser.add_argument("--env-file", dest="env_file", type=Path, help="Load variables from this .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    listing = subparsers.add_parser("list", help="List registered scenarios")
    listing.add_argument("--service", type=str)

    run = subparsers.add_parser("run", help="Provision non-compliant resources and tear them down")
    run.add_argument("rules", nargs="*", help="AWS Config rule names")
    run.add_argument("--all", dest="run_all", action="store_true")
    run.add_argument("--service", type=str, help="Only scenarios for this service (e.g. s3, iam)")
    run.add_argument("--keep", action="store_true", help="Keep created resources after the run")
    run.add_argument("--format", "-f", choices=["json", "csv"], default=None)
    run.add_argument("--out", "-o", type=Path)

    sweeper = subparsers.add_parser("sweep", help="Delete every resource carrying the drill tag")
    sweeper.add_argument("--tag-key", dest="tag_key", type=str)
    sweeper.add_argument("--apply", action="store_true", help="Delete instead of listing")

    summary = subparsers.add_parser("summary", help="Summarize a JSON run report")
    summary.add_argument("--from", dest="from_path", type=Path, required=True)

    results = subparsers.add_parser("results", help="Show scenario results from a JSON run report")
    results.add_argument("--from", dest="from_path", type=Path, required=True)

    return parser.parse_args(list(argv))


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        load_environment(args.env_file)
        if args.command == "list":
            _print_scenarios(args.service)
        elif args.command == "run":
            result = run_drill(
                args.rules,
                run_all=args.run_all,
                service=args.service,
                keep=args.keep,
                fmt=args.format,
                output_path=args.out,
            )
            if result.failed:
                return EXIT_FAILURE
        elif args.command == "sweep":
            results = run_sweep(args.tag_key, args.apply)
            if any(item.mode == "FAILED" for item in results):
                return EXIT_FAILURE
        elif args.command == "summary":
            _print_summary(args.from_path)
        elif args.command == "results":
            _print_results(args.from_path)
        else:  # pragma: no cover
            raise ValueError(f"Unknown command {args.command}")
    except Exception as exc:  # pragma: no cover - top level guard
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_SUCCESS


def _print_table(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    column_widths = [max(len(str(row[idx])) for row in ([headers] + list(rows))) for idx in range(len(headers))]

    def _format_row(values: Sequence[Any]) -> str:
        return " | ".join(str(value).ljust(column_widths[idx]) for idx, value in enumerate(values))

    print(_format_row(headers))
    print("-+-".join("-" * width for width in column_widths))
    for row in rows:
        print(_format_row(row))


def _print_scenarios(service: Optional[str]) -> None:
    registry = _registry()
    wanted = service.strip().lower() if service else None
    rows = [
        [rule, module.META.get("service", ""), module.META.get("title", ""), ", ".join(module.META.get("required_env", []))]
        for rule, module in sorted(registry.items())
        if wanted is None or module.META.get("service") == wanted
    ]
    if not rows:
        print("No scenarios found.")
        return
    _print_table(["Rule", "Service", "Title", "Requires"], rows)


def _print_summary(path: Path) -> None:
    result = load_result(path)
    summary = result.get("summary", {})
    print("config-drill Run Summary")
    print("========================")
    print(f"Account        : {result.get('account_id') or 'n/a'}")
    print(f"Region         : {result.get('region', 'n/a')}")
    print(f"Total          : {summary.get('total', 'n/a')}")
    print(f"Non-compliant  : {summary.get('NON_COMPLIANT', 'n/a')}")
    print(f"Compliant      : {summary.get('COMPLIANT', 'n/a')}")
    print(f"Not evaluated  : {summary.get('NOT_EVALUATED', 'n/a')}")
    print(f"Errors         : {summary.get('ERROR', 'n/a')}")
    print(f"Misconfigured  : {summary.get('MISCONFIGURED', 'n/a')}")
    print(f"Cleanup issues : {summary.get('cleanup_failures', 'n/a')}")


def _print_results(path: Path) -> None:
    result = load_result(path)
    scenarios: Sequence[Dict[str, Any]] = result.get("results", [])
    if not scenarios:
        print("No scenario results.")
        return

    rows = [
        [
            item.get("rule", ""),
            item.get("status", ""),
            item.get("service", ""),
            len(item.get("resources", [])),
            item.get("error") or "",
        ]
        for item in scenarios
    ]
    _print_table(["Rule", "Status", "Service", "Resources", "Error"], rows)


if __name__ == "__main__":
    sys.exit(main())
