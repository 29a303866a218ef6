from __future__ import annotations

import argparse
import sys

from percy_env._console import print_context, print_error
from percy_env._environment import Environment, RepoNotFoundError
from percy_env._git import SubprocessGit


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="percy-env",
        description="Detect the CI environment and print the resolved build context.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Write the build context as JSON to stdout instead of a table.",
    )
    parser.add_argument(
        "--cwd",
        default=None,
        help="Directory to run git in (default: current directory).",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(argv)

    environment = Environment(git=SubprocessGit(cwd=args.cwd))
    try:
        context = environment.build_context()
    except RepoNotFoundError as exc:
        print_error(str(exc))
        return 1

    if args.json:
        sys.stdout.write(context.model_dump_json() + "\n")
    else:
        print_context(context)
    return 0
