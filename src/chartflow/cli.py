"""Command line: render CSV or analyzed text to PNG/SVG, and manage chart history."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from datetime import datetime
from pathlib import Path

from .analysis import analyze_text, top_recommendation
from .config import Settings
from .csvdata import parse_csv, to_csv
from .errors import AnalysisError, ChartflowError, EmptyDatasetError
from .export import ExportFormat
from .models import ChartType, Dataset
from .palettes import PaletteRegistry
from .samples import SAMPLES, load_sample
from .session import ChartSession
from .storage import ChartStore
from .theme import BUILTIN_PALETTES, THEMES

logger = logging.getLogger(__name__)


def _read(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ChartflowError(f"Cannot read {source}: {exc}") from exc


def _load_dataset(args: argparse.Namespace) -> Dataset:
    if args.sample:
        dataset = load_sample(args.sample)
    elif args.input:
        default_title = "" if args.input == "-" else Path(args.input).stem.replace("_", " ").title()
        dataset = parse_csv(_read(args.input), title=default_title)
    else:
        raise ChartflowError("Give a CSV file (or - for stdin) or --sample")
    if args.title:
        dataset = Dataset(args.title, dataset.columns, dataset.rows)
    return dataset


def _palettes(args: argparse.Namespace) -> PaletteRegistry:
    registry = PaletteRegistry()
    if args.colors:
        registry.create(c.strip() for c in args.colors.split(",") if c.strip())
    else:
        registry.select(args.palette)
    return registry


def _write_chart(dataset: Dataset, chart_type: ChartType, args: argparse.Namespace, settings: Settings) -> None:
    if dataset.is_empty:
        raise EmptyDatasetError(f"Nothing to chart: {dataset.title or 'dataset'} has no rows")
    store = ChartStore(settings.storage_path)
    session = ChartSession(
        dataset,
        chart_type,
        palettes=_palettes(args),
        settings=settings,
        show_grid=not args.no_grid,
        show_legend=not args.no_legend,
    )
    try:
        artifact = asyncio.run(session.export(args.format))
        path = artifact.write(args.output)
        if args.save:
            store.upsert(session.snapshot())
    finally:
        session.close()
    print(path)


def cmd_render(args: argparse.Namespace, settings: Settings) -> int:
    _write_chart(_load_dataset(args), ChartType(args.type), args, settings)
    return 0


def cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    text = _read(args.input)
    try:
        result = analyze_text(text, settings)
    except AnalysisError as exc:
        # Manual entry path: treat the input as CSV
        logger.warning("Analysis unavailable (%s); reading input as CSV", exc)
        dataset = parse_csv(text, title=args.title or "")
        chart_type = ChartType(args.type) if args.type else ChartType.BAR
    else:
        dataset = result.to_dataset()
        chart_type = ChartType(args.type) if args.type else top_recommendation(result)
        for rec in result.recommendations:
            print(f"# {rec.type.value:<8} {rec.confidence:>3}%  {rec.reason}")
        if args.title:
            dataset = Dataset(args.title, dataset.columns, dataset.rows)

    if args.format:
        _write_chart(dataset, chart_type, args, settings)
    else:
        print(f"# {dataset.title}")
        print(to_csv(dataset))
    return 0


def cmd_history(args: argparse.Namespace, settings: Settings) -> int:
    store = ChartStore(settings.storage_path)
    if args.action == "list":
        for record in store.list():
            when = datetime.fromtimestamp(record.last_modified / 1000).strftime("%b %d, %Y %H:%M")
            print(f"{record.id}  {record.chart_type.value:<8} {when}  {record.title}")
    elif args.action == "delete":
        if not args.id:
            raise ChartflowError("history delete needs a chart id")
        remaining = store.delete(args.id)
        print(f"{len(remaining)} saved chart(s) left")
    elif args.action == "clear":
        store.clear()
    return 0


def _add_output_options(parser: argparse.ArgumentParser, *, format_required: bool) -> None:
    parser.add_argument("--title", help="chart title")
    parser.add_argument(
        "-f", "--format",
        choices=[f.value for f in ExportFormat],
        default="png" if format_required else None,
        help="output format" + ("" if format_required else " (omit to print the dataset instead)"),
    )
    parser.add_argument("-o", "--output", default=".", help="output directory (default: current)")
    parser.add_argument("--palette", default="default", choices=sorted(BUILTIN_PALETTES), help="built-in palette")
    parser.add_argument("--colors", help="custom palette as comma-separated colors, e.g. '#111,#222'")
    parser.add_argument("--theme", choices=sorted(THEMES), help="background theme")
    parser.add_argument("--no-grid", action="store_true", help="hide grid lines")
    parser.add_argument("--no-legend", action="store_true", help="hide the legend")
    parser.add_argument("--save", action="store_true", help="also record the chart in history")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chartflow", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="render a CSV file to an image")
    render.add_argument("input", nargs="?", help="CSV file, or - for stdin")
    render.add_argument("--sample", choices=sorted(SAMPLES), help="use a built-in sample dataset")
    render.add_argument("-t", "--type", default="bar", choices=[t.value for t in ChartType], help="chart type")
    _add_output_options(render, format_required=True)
    render.set_defaults(func=cmd_render)

    analyze = sub.add_parser("analyze", help="extract a dataset from free text with the analysis service")
    analyze.add_argument("input", help="text file, or - for stdin")
    analyze.add_argument("-t", "--type", choices=[t.value for t in ChartType], help="override the recommended type")
    _add_output_options(analyze, format_required=False)
    analyze.set_defaults(func=cmd_analyze)

    history = sub.add_parser("history", help="list or delete saved charts")
    history.add_argument("action", choices=["list", "delete", "clear"])
    history.add_argument("id", nargs="?", help="chart id for delete")
    history.set_defaults(func=cmd_history)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = Settings.from_env()
        if getattr(args, "theme", None):
            settings = dataclasses.replace(settings, theme=args.theme)
        return args.func(args, settings)
    except (ChartflowError, KeyError, ValueError) as e:
        print(f"chartflow error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
