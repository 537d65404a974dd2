"""Command-line interface for progless."""

import argparse
import logging
import sys

import tracerite

from progless import __version__
from progless.demo import run_demo
from progless.msg import Msg, MsgKind, strip_ansi_str

tracerite.load()

__all__ = ["main"]

MSG_COMMANDS = (
    "info",
    "error",
    "warning",
    "success",
    "notice",
    "debug",
    "task",
    "done",
    "crunched",
    "confirm",
    "print",
)

DEFAULT_PREFIX_COLOR = 199


def _add_msg_options(parser: argparse.ArgumentParser):
    parser.add_argument("msg", help="Message text", nargs="?", default="")
    parser.add_argument(
        "-i",
        "--indent",
        help="Indent the message by this many levels (0-4)",
        type=int,
        default=0,
    )
    parser.add_argument(
        "-t",
        "--time",
        action="store_true",
        help="Append a timestamp",
    )
    parser.add_argument(
        "-e",
        "--exit",
        help="Exit with this status code after printing",
        type=int,
        default=0,
    )
    parser.add_argument("--stderr", action="store_true", help="Print to stderr instead of stdout")
    parser.add_argument("--no-color", action="store_true", help="Strip ANSI styling")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="progless",
        description="Print styled status messages, or demo the progress display",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose mode: enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name in MSG_COMMANDS:
        if name == "print":
            help_text = "Print a message with a custom prefix"
        elif name == "confirm":
            help_text = "Ask a yes/no question; exits 1 on no"
        else:
            help_text = f"Print a message prefixed with {name.title()}:"
        p = sub.add_parser(name, help=help_text)
        _add_msg_options(p)
        if name == "print":
            p.add_argument("-p", "--prefix", help="Custom prefix text", type=str, default=None)
            p.add_argument(
                "-c",
                "--prefix-color",
                help=f"Prefix color, 0-255 (default: {DEFAULT_PREFIX_COLOR})",
                type=int,
                default=DEFAULT_PREFIX_COLOR,
            )

    p = sub.add_parser("blank", help="Print blank lines")
    p.add_argument("-c", "--count", help="Number of lines (default: 1)", type=int, default=1)
    p.add_argument("--stderr", action="store_true", help="Print to stderr instead of stdout")

    p = sub.add_parser("demo", help="Run a progress bar over simulated work")
    p.add_argument("-n", "--count", help="Repeat the work list this many times", type=int, default=1)
    p.add_argument("-t", "--threads", help="Number of worker threads (default: 4)", type=int, default=4)
    p.add_argument("--serial", action="store_true", help="Run without worker threads")
    return parser


def make_msg(args) -> Msg:
    """Build the message for a message subcommand."""
    if args.command == "print":
        if args.prefix:
            msg = Msg.custom(args.prefix, args.prefix_color, args.msg)
        else:
            msg = Msg.plain(args.msg)
    else:
        kind = MsgKind.from_name(args.command)
        msg = Msg(args.msg, kind)
    msg.with_indent(args.indent).with_timestamp(args.time)
    return msg


def do_blank(args):
    out = sys.stderr if args.stderr else sys.stdout
    out.write("\n" * max(1, args.count))
    out.flush()


def do_msg(args) -> int:
    """Print (or prompt with) a message and return the exit status."""
    if not 0 <= args.indent <= 4:
        raise ValueError(f"Indent must be between 0 and 4, not {args.indent}")
    if args.command == "print" and not 0 <= args.prefix_color <= 255:
        raise ValueError(f"Prefix color must be between 0 and 255, not {args.prefix_color}")

    msg = make_msg(args)
    if args.command == "confirm":
        return 0 if msg.prompt() else 1

    out = sys.stderr if args.stderr else sys.stdout
    msg.with_newline()
    if args.no_color:
        out.write(strip_ansi_str(str(msg)))
        out.flush()
    else:
        msg.print(out)
    return args.exit


def _main() -> int:
    """Internal main function that may raise exceptions."""
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(threadName)s: %(message)s",
    )

    if args.command == "blank":
        do_blank(args)
        return 0
    if args.command == "demo":
        if args.count < 1:
            raise ValueError("Count must be at least 1")
        if args.threads < 1 and not args.serial:
            raise ValueError("Threads must be at least 1 (or use --serial)")
        run_demo(count=args.count, threads=args.threads, serial=args.serial)
        return 0
    return do_msg(args)


def main():
    """Main entry point for the CLI with exception handling."""
    try:
        code = _main()
    except (KeyboardInterrupt, BrokenPipeError):
        sys.exit(1)
    except ValueError as e:
        Msg.error(str(e)).with_newline().eprint()
        sys.exit(1)
    if code:
        sys.exit(code)
