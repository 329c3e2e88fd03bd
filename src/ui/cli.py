"""CLI workflow shell covering Count → Parse for graph CSV files."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, TextIO

from common.config import DEFAULT_CONFIG_PATH, DEFAULT_PROFILE, load_runtime_config
from common.errors import BackendError
from common.models import EdgeRecord, GraphFormat, GraphRecord, IngestionJob, RuntimeConfig
from common.progress import ConsoleProgressSink, FanOutSink, JsonlProgressSink, ProgressSink
from core.parsing import FileParser, build_job


def record_to_json(record: GraphRecord) -> str:
    payload = record.as_dict() if isinstance(record, EdgeRecord) else record
    return json.dumps(payload, ensure_ascii=False)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def load_config(args: argparse.Namespace) -> RuntimeConfig:
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
    return load_runtime_config(profile=args.profile, config_path=config_path)


def create_job(args: argparse.Namespace, runtime: RuntimeConfig) -> IngestionJob:
    return build_job(
        args.file,
        args.type,
        runtime,
        format=args.format,
        delimiter=args.delimiter,
        verbose=args.verbose,
    )


def build_progress_sink(
    args: argparse.Namespace, job: IngestionJob, runtime: RuntimeConfig
) -> Optional[ProgressSink]:
    granularity = runtime.profile.progress_granularity
    sinks: List[ProgressSink] = []
    if not args.quiet:
        sinks.append(
            ConsoleProgressSink(
                job.file_path,
                granularity=granularity,
                writer=lambda line: print(line, file=sys.stderr),
            )
        )
    if args.progress_log:
        sinks.append(JsonlProgressSink(Path(args.progress_log), job.file_path, granularity=granularity))
    if not sinks:
        return None
    return sinks[0] if len(sinks) == 1 else FanOutSink(sinks)


def command_count(args: argparse.Namespace) -> None:
    runtime = load_config(args)
    job = create_job(args, runtime)
    parser = FileParser.from_config(job, runtime)
    print(f"[count] {job.file_path} type={job.component_type.name.lower()} format={job.format.value}")
    state = parser.compute_lines()
    print(f"[count] Total lines in file: {state.line_count}")


def command_parse(args: argparse.Namespace) -> None:
    runtime = load_config(args)
    job = create_job(args, runtime)
    parser = FileParser.from_config(job, runtime, progress_sink=build_progress_sink(args, job, runtime))

    print(f"[parse] Computing line count for {job.file_path}...", file=sys.stderr)
    state = parser.compute_lines()
    print(f"[parse] Total lines in file: {state.line_count}", file=sys.stderr)

    output: TextIO
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output = output_path.open("w", encoding="utf-8")
    else:
        output = sys.stdout

    start = time.perf_counter()
    try:
        for record in parser.records(state):
            output.write(record_to_json(record))
            output.write("\n")
            parser.tick_progress()
        parser.finish_progress()
    finally:
        if output is not sys.stdout:
            output.close()
    duration = time.perf_counter() - start

    if state.column_types is not None:
        print(f"[parse] Column types: {json.dumps(state.column_types)}", file=sys.stderr)
    rate = state.records_emitted / duration if duration else float(state.records_emitted)
    print(
        f"[parse] Emitted {state.records_emitted} {job.component_type.name.lower()} record(s) "
        f"in {duration:.2f}s ({rate:,.0f} records/s)",
        file=sys.stderr,
    )


def add_job_arguments(command: argparse.ArgumentParser) -> None:
    command.add_argument("file", help="Graph file to ingest")
    command.add_argument(
        "--type",
        required=True,
        choices=["v", "vertex", "e", "edge"],
        help="Component type described by the file",
    )
    command.add_argument(
        "--format",
        default=GraphFormat.CSV.value,
        choices=[member.value for member in GraphFormat],
        help="Input format (only csv has a reader today)",
    )
    command.add_argument(
        "--delimiter",
        help="Field delimiter (defaults to the configured one; use '\\t' for tabs)",
    )
    command.add_argument(
        "--profile",
        default=DEFAULT_PROFILE,
        help="Profile from config/defaults.json (e.g., default, large_files)",
    )
    command.add_argument("--config", help="Path to an alternative config JSON")
    command.add_argument("--verbose", action="store_true", help="Log pipeline details to stderr")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graph-ingest", description="Streaming ingestion of vertex/edge CSV files"
    )
    subparsers = parser.add_subparsers(dest="command")

    count = subparsers.add_parser("count", help="Count lines and validate file structure")
    add_job_arguments(count)
    count.set_defaults(func=command_count)

    parse = subparsers.add_parser("parse", help="Stream records as JSON lines")
    add_job_arguments(parse)
    parse.add_argument("--output", help="Write JSON lines here instead of stdout")
    parse.add_argument(
        "--progress-log",
        help="Path to JSONL file for structured progress events",
    )
    parse.add_argument("--quiet", action="store_true", help="Disable console progress lines")
    parse.set_defaults(func=command_parse)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    configure_logging(args.verbose)
    try:
        args.func(args)
    except FileNotFoundError as exc:
        raise SystemExit(f"Error: {exc.strerror or 'file not found'}: {exc.filename}") from exc
    except BackendError as exc:
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
