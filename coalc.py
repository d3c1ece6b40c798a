#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import os
from pathlib import Path
from typing import Optional

from coal_console import Console
from coal_context import CoalesceContext, LogLevel
from coal_internal_error import InternalCoalescerError
from coal_logger import log_error, log_exception, log_info
from coal_watch import DirectoryEvents, print_banner, render, watch


def _init_env_defaults(args: argparse.Namespace) -> None:
    if not args.watched:
        args.watched = os.getenv("COAL_WATCHED_DIR")
    if not args.output:
        args.output = os.getenv("COAL_OUTPUT_DIR")


def build_coalesce_context(args: argparse.Namespace) -> CoalesceContext:
    """Build a CoalesceContext from command-line arguments."""
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.ERROR

    return CoalesceContext(
        watched_dir=Path(args.watched) if args.watched else Path("."),
        output_dir=Path(args.output) if args.output else Path("."),
        use_polling=getattr(args, 'poll', False),
        color=not getattr(args, 'no_color', False),
        log_rich_format=getattr(args, 'log', False),
        log_level=log_level,
    )


def check_directories(context: CoalesceContext, args: argparse.Namespace) -> Optional[str]:
    """
    Validate the directory arguments and create the output directory.

    Returns an error message, or None when the directories are usable.
    """
    if not args.watched:
        return "error: [COALC-0010] no watched directory given (argument or $COAL_WATCHED_DIR)"
    if not args.output:
        return "error: [COALC-0020] no output directory given (argument or $COAL_OUTPUT_DIR)"
    if not context.watched_dir.is_dir():
        return f"error: [COALC-0030] watched directory '{context.watched_dir}' does not exist"
    if context.output_dir.exists() and context.output_dir.resolve() == context.watched_dir.resolve():
        return f"error: [COALC-0040] output directory '{context.output_dir}' is the watched directory; the output would overwrite the entry file"
    try:
        context.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return f"error: [COALC-0050] cannot create output directory '{context.output_dir}': {e}"
    return None


def _prepare(args: argparse.Namespace):
    """Shared setup, returning (context, console, exit_code)."""
    _init_env_defaults(args)
    context = build_coalesce_context(args)
    console = Console(color=None if context.color else False)
    problem = check_directories(context, args)
    if problem is not None:
        log_error(context, problem)
        return context, console, 1
    log_info(context, f"Watched directory: '{context.watched_dir}'")
    log_info(context, f"Output file: '{context.output_path}'")
    return context, console, 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Merge on startup and again on every change in the watched directory."""
    context, console, exit_code = _prepare(args)
    if exit_code != 0:
        return exit_code

    try:
        with DirectoryEvents(context.watched_dir, use_polling=context.use_polling, context=context) as events:
            return watch(context, events, console)
    except OSError as e:
        log_exception(context, f"error: [COALC-0060] cannot watch '{context.watched_dir}': {e}", e)
        return 1
    # Handle Ctrl-C while the observer is starting or stopping
    except KeyboardInterrupt:
        return 0


def cmd_once(args: argparse.Namespace) -> int:
    """Merge a single time and exit."""
    context, console, exit_code = _prepare(args)
    if exit_code != 0:
        return exit_code

    print_banner(context, console)
    try:
        render(context, console)
    except InternalCoalescerError as e:
        log_error(context, e.format())
        return 1
    except OSError as e:
        log_exception(context, f"error: [COAL-0010] I/O failure: {e}", e)
        return 1
    return 0


def _add_directory_args(parser: argparse.ArgumentParser) -> None:
    """Add the watched and output directory arguments."""
    parser.add_argument("watched", nargs="?",
                        help="Directory holding the source files (default: $COAL_WATCHED_DIR)")
    parser.add_argument("output", nargs="?",
                        help="Directory receiving the merged file (default: $COAL_OUTPUT_DIR)")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="coalc", description="Merge Java sources into a single CodinGame submission")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")
    parser.add_argument("--no-color",
                        action='store_true',
                        default=False,
                        help="Disable colors and in-place redrawing of progress lines")

    ###########################
    # watch command
    ###########################
    p_watch = subparsers.add_parser("watch", help="Merge now and on every change")
    p_watch.add_argument("--poll", action="store_true",
                         help="Poll the directory instead of using native change notifications")
    _add_directory_args(p_watch)
    p_watch.set_defaults(func=cmd_watch)

    ###########################
    # once command
    ###########################
    p_once = subparsers.add_parser("once", help="Merge a single time and exit", aliases=["merge"])
    _add_directory_args(p_once)
    p_once.set_defaults(func=cmd_once)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
