"""Entry point for optiban CLI."""

import logging
import sys

from optiban.cli import build_parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        level=logging.INFO if args.verbose else logging.ERROR,
    )

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
