# -*- coding: utf-8 -*-
"""Command-line host: run, animate or single-step a pseudocode program."""

import argparse
import logging
import sys
import time
from typing import List, Optional

from .evaluator import format_value
from .frames import ExecutionState
from .runtime import DEFAULT_MAX_CALL_DEPTH, PseudoRuntime


def _console_input(prompt: str) -> Optional[str]:
    try:
        return input(prompt + " ")
    except EOFError:
        return None


def _format_variables(state: ExecutionState) -> str:
    return ", ".join(f"{name}={format_value(value)}" for name, value in state.variables.items())


def _trace(runtime: PseudoRuntime, executed: int, state: ExecutionState) -> None:
    line = runtime.lines[executed]
    print(f"[{line.source_line:4d}] {line.text:<40s} {{{_format_variables(state)}}}", file=sys.stderr)


def summarize(runtime: PseudoRuntime) -> None:
    print("---- Statement counts ----")
    for tag, count in sorted(runtime.statement_counts().items(), key=lambda kv: (-kv[1], kv[0])):
        print(f"{tag:14s}: {count}")
    print("---- Functions ----")
    for fn in runtime.functions.values():
        print(f"{fn.kind:9s} {fn.name}({', '.join(fn.params)})  lines {fn.start}-{fn.end}")


def run_cli(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Step-driven pseudocode interpreter")
    parser.add_argument("program", help="Source file path, or literal source with -source")
    parser.add_argument("-source", "--source", dest="source_mode", action="store_true",
                        help="Treat program argument as literal source text")
    parser.add_argument("--step", action="store_true", help="Wait for Enter before each statement")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds to sleep between statements")
    parser.add_argument("--trace", action="store_true", help="Print each executed line and the variables")
    parser.add_argument("--max-steps", type=int, default=None, help="Give up after this many statements")
    parser.add_argument("--max-call-depth", type=int, default=DEFAULT_MAX_CALL_DEPTH)
    parser.add_argument("--summary", action="store_true", help="Print statement counts and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.source_mode:
        source_text = args.program
    else:
        try:
            with open(args.program, "r", encoding="utf-8") as handle:
                source_text = handle.read()
        except OSError as exc:
            print(f"Failed to read {args.program}: {exc}", file=sys.stderr)
            return 1

    runtime = PseudoRuntime(source_text, output=print, input_provider=_console_input,
                            max_call_depth=args.max_call_depth)
    if args.summary:
        summarize(runtime)
        return 0

    stepping = args.step
    steps = 0
    state = runtime.snapshot()
    while not state.finished:
        if args.max_steps is not None and steps >= args.max_steps:
            print(f"Stopped after {steps} steps", file=sys.stderr)
            return 2
        executed = state.current_line
        if stepping:
            line = runtime.lines[executed]
            # EOF on stdin: run the rest without pausing
            if _console_input(f"-> [{line.source_line}] {line.text}") is None:
                stepping = False
        state = runtime.step()
        steps += 1
        if args.trace:
            _trace(runtime, executed, state)
        if args.delay > 0:
            time.sleep(args.delay)
    return 0


def main() -> None:
    raise SystemExit(run_cli())
