"""
metricql command line.

    metricql "p99 latency for unicorn over the last 15 minutes"
    metricql                      # interactive REPL, history in METRICQL_HISTORY_FILE

Usage:
    metricql [PROMPT] [--mode heuristic|ontology|llm] [--ontology PATH]
             [--dry-run] [--verbose]
"""

import argparse
import logging
import sys
from typing import Callable, List, Optional, TextIO

from pydantic import ValidationError

from metricql.core.config import MetricQLConfig
from metricql.core.constants import REPL_HISTORY_FILE, REPL_HISTORY_LENGTH, REPL_PROMPT
from metricql.core.errors import MetricQLError
from metricql.nlq.pipeline import QueryPipeline
from metricql.nlq.summarizer import summarize
from metricql.utils.log_utils import get_logger, set_level

logger = get_logger(__name__)

HELP_TEXT = """
metricql REPL Help

Type natural language prompts to query Datadog metrics.

Examples:
  99th percentile latency for unicorn over the last 15 minutes
  avg latency for unicorn
  max error rate for unicorn-api last hour

Commands:
  help, ?    Show this help message
  clear      Clear the screen
  exit, quit Exit the REPL

Tip:
  Use metric names like "latency", "errors", or "rps"
  Use time phrases like "last hour", "past 30 minutes"
  Name a service from the ontology to scope the query
"""

CLEAR_SCREEN = "\033[H\033[2J"


def _load_readline():
    try:
        import readline
    except ImportError:
        # Not built on every platform; input() still works without it
        return None
    return readline


class ReplHistory:
    """
    Line editing and history kept across REPL sessions.

    Backed by the readline module when the interpreter has one; otherwise
    load() and save() do nothing.
    """

    def __init__(self, path: str = REPL_HISTORY_FILE, backend=None, length: int = REPL_HISTORY_LENGTH):
        self.path = path
        self.length = length
        self._readline = backend if backend is not None else _load_readline()

    @property
    def enabled(self) -> bool:
        return self._readline is not None

    def load(self) -> None:
        if not self.enabled:
            return
        self._readline.set_history_length(self.length)
        try:
            self._readline.read_history_file(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[REPL] Could not read history file {self.path}: {e}")

    def save(self) -> None:
        if not self.enabled:
            return
        try:
            self._readline.write_history_file(self.path)
        except OSError as e:
            logger.warning(f"[REPL] Could not write history file {self.path}: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metricql",
        description="Translate natural-language questions into Datadog metric queries",
    )
    parser.add_argument("prompt", nargs="?", help="Question to answer; omit for the REPL")
    parser.add_argument("--mode", choices=["heuristic", "ontology", "llm"],
                        help="Resolution strategy (default: METRICQL_MODE or heuristic)")
    parser.add_argument("--ontology", help="Path to the ontology YAML document")
    parser.add_argument("--dry-run", action="store_true",
                        help="Only resolve and compile; do not call Datadog")
    parser.add_argument("--hot-reload", action="store_true", default=None,
                        help="Re-read the ontology before every prompt")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log pipeline steps")
    return parser


def handle_prompt(pipeline: QueryPipeline, prompt: str, dry_run: bool, out: TextIO) -> bool:
    """Resolve (and unless dry_run, execute) one prompt. Returns False on failure."""
    try:
        resolution = pipeline.resolve(prompt)
        print(
            f"Query: {resolution.compiled.query} "
            f"(from={resolution.compiled.from_ts} to={resolution.compiled.to_ts}, "
            f"window={resolution.compiled.time_window})",
            file=out,
        )
        if dry_run:
            return True
        result = pipeline.backend.query_metrics(resolution.compiled)
    except MetricQLError as e:
        print(f"Error ({type(e).__name__}): {e}", file=out)
        return False

    print(f"Query Summary: {summarize(result, unit=resolution.unit)}", file=out)
    return True


def run_repl(
    pipeline: QueryPipeline,
    dry_run: bool = False,
    read_line: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
    history: Optional[ReplHistory] = None,
) -> None:
    """Line loop; failures are printed and the loop continues."""
    if history is not None:
        history.load()
    try:
        _repl_loop(pipeline, dry_run, read_line, out)
    finally:
        if history is not None:
            history.save()


def _repl_loop(pipeline: QueryPipeline, dry_run: bool, read_line: Callable[[str], str], out: TextIO) -> None:
    print("metricql REPL mode -- type 'help' or 'exit' to quit", file=out)
    while True:
        try:
            line = read_line(REPL_PROMPT)
        except (EOFError, KeyboardInterrupt):
            print(file=out)
            return

        command = line.strip()
        if not command:
            continue
        if command in ("exit", "quit"):
            return
        if command in ("help", "?"):
            print(HELP_TEXT, file=out)
            continue
        if command == "clear":
            print(CLEAR_SCREEN, end="", file=out)
            continue
        handle_prompt(pipeline, command, dry_run, out)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.INFO)

    try:
        config = MetricQLConfig.from_env(
            mode=args.mode,
            ontology_path=args.ontology,
            hot_reload=args.hot_reload,
        )
        config.require_credentials(backend=not args.dry_run)
    except (MetricQLError, ValidationError) as e:
        print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
        return 2

    pipeline = QueryPipeline(config)
    try:
        if args.prompt:
            return 0 if handle_prompt(pipeline, args.prompt, args.dry_run, sys.stdout) else 1
        run_repl(pipeline, dry_run=args.dry_run, history=ReplHistory())
        return 0
    finally:
        pipeline.close()


if __name__ == "__main__":
    sys.exit(main())
