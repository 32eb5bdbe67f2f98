# Copyright 2026 XMOS LIMITED.
# This Software is subject to the terms of the XMOS Public Licence: Version 1.
"""Command line front end to the filter_lab request functions.

Each sub-command reads a JSON request from a file (or stdin) and writes
the JSON response to stdout (or ``--output``)::

    echo '{"filterType": "lowpass", "order": 2}' | filter-lab design
"""

import argparse
import json
import logging
import sys

from filter_lab import __version__, api
from filter_lab.dsp.errors import FilterLabError

logger = logging.getLogger(__name__)

COMMANDS = {
    "design": (api.design_filter, "Design a filter and analyse its response."),
    "generate": (api.generate_signal, "Generate a test signal."),
    "apply": (api.apply_filter, "Filter a signal with a set of coefficients."),
    "analyze": (api.analyze_signal, "Calculate the magnitude spectrum of a signal."),
}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filter-lab", description="IIR filter design and signal analysis."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=False, help="Enable debug output."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, (_, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.add_argument(
            "request",
            nargs="?",
            default="-",
            help="path to the JSON request, '-' (the default) reads stdin",
        )
        sub.add_argument("--output", "-o", type=str, default=None, help="Output location.")
        sub.add_argument(
            "--indent", type=int, default=None, help="Indent the JSON output by this many spaces."
        )
    return parser


def _read_request(path: str):
    if path == "-":
        return json.load(sys.stdin)
    with open(path) as f:
        return json.load(f)


def main(argv=None) -> int:
    """Run the command line front end, returning the exit status."""
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handler, _ = COMMANDS[args.command]
    try:
        request = _read_request(args.request)
    except OSError as e:
        print(f"Error: cannot read {args.request}: {e.strerror}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: {args.request} is not valid JSON: {e}", file=sys.stderr)
        return 1

    try:
        response = handler(request)
    except FilterLabError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    text = json.dumps(response, indent=args.indent)
    if args.output is None:
        print(text)
    else:
        with open(args.output, "w") as f:
            f.write(text + "\n")
        logger.debug("wrote %s response to %s", args.command, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
