"""
Command-Line Interface (CLI) for the Node.js compatibility test tooling.

This module exposes the path computations of `selection` to the terminal so
test drivers and maintainers can see which upstream tests are run, in which
group, and which are protected from regeneration. It is built using Python's
`argparse` module and never touches the test files themselves.

Usage:
    python -m node_compat_app.cli [--config PATH] [--settings PATH] <command> [options]

Example:
    python -m node_compat_app.cli partition --json
    python -m node_compat_app.cli --platform windows partition
    python -m node_compat_app.cli ignored parallel/test-assert.js
    python -m node_compat_app.cli discover ~/src/node/test
"""

import argparse
import json
import logging
import re
import sys
from typing import Any, Dict, List, NoReturn, Optional

import yaml  # type: ignore

from node_compat_app import selection
from node_compat_app import suite_config
from node_compat_app.config import load_settings

logger = logging.getLogger(__name__)


def _fail(msg: str, code: int, json_output: bool = False) -> NoReturn:
    """Report a fatal error in the requested format and exit."""
    if json_output:
        print(json.dumps({"error": msg, "code": code}))
    else:
        print(f"Error: {msg}")
    sys.exit(code)


def handle_paths(
    config: Dict[str, Any],
    section: str = "tests",
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """
    Prints the composite test paths of one configuration section.

    Args:
        config: The loaded test configuration.
        section: The section to flatten ('tests', 'ignore', 'windowsIgnore', ...).
    """
    suites = suite_config.get_suites(config, section)
    paths = selection.get_paths_from_test_suites(suites)
    if json_output:
        print(json.dumps({"section": section, "paths": paths, "count": len(paths)}))
    elif not quiet:
        for path in paths:
            print(path)


def handle_partition(
    config: Dict[str, Any],
    platform: str,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Prints the parallel and sequential groups for a platform."""
    result = selection.select_test_paths(config, platform)
    if json_output:
        print(json.dumps(result))
        return
    if quiet:
        return
    for group in ("parallel", "sequential", "skipped"):
        print(f"{group.capitalize()} tests ({len(result[group])}):")
        for path in result[group]:
            print(f"  - {path}")


def handle_ignore(
    config: Dict[str, Any], json_output: bool = False, quiet: bool = False
) -> None:
    """Prints the ignore list as pattern text."""
    patterns = [p.pattern for p in selection.build_ignore_list(config)]
    if json_output:
        print(json.dumps({"patterns": patterns, "count": len(patterns)}))
    elif not quiet:
        for pattern in patterns:
            print(pattern)


def handle_ignored(
    config: Dict[str, Any],
    paths: List[str],
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Reports which of the given paths are protected from regeneration."""
    ignore_list = selection.build_ignore_list(config)
    results = [
        {"path": path, "ignored": selection.is_ignored(path, ignore_list)}
        for path in paths
    ]
    ignored_count = sum(1 for r in results if r["ignored"])
    if json_output:
        print(json.dumps({"results": results, "ignored": ignored_count}))
    elif not quiet:
        for r in results:
            print(f"{'ignored' if r['ignored'] else 'kept':<8} {r['path']}")


def handle_check(
    config: Dict[str, Any], json_output: bool = False, quiet: bool = False
) -> None:
    """Checks the configuration conventions; exits with 1 on problems."""
    problems = suite_config.check_config(config)
    if json_output:
        print(json.dumps({"problems": problems, "count": len(problems)}))
    elif not quiet:
        if problems:
            for p in problems:
                where = "/".join(x for x in (p["section"], p["suite"], p["entry"]) if x)
                print(f"Problem: {where}: {p['problem']}")
        else:
            print("Configuration OK.")
    if problems:
        sys.exit(1)


def handle_discover(
    config: Dict[str, Any],
    node_test_dir: str,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Prints which upstream files would be regenerated and which are kept."""
    result = selection.discover_upstream_tests(node_test_dir, config)
    if json_output:
        print(
            json.dumps(
                {
                    "node_test_dir": node_test_dir,
                    "regenerate": result["regenerate"],
                    "ignored": result["ignored"],
                }
            )
        )
    elif not quiet:
        print(f"To regenerate ({len(result['regenerate'])}):")
        for path in result["regenerate"]:
            print(f"  - {path}")
        print(f"Ignored ({len(result['ignored'])}):")
        for path in result["ignored"]:
            print(f"  - {path}")


def _dispatch(args: argparse.Namespace) -> None:
    settings = load_settings(args.settings)
    config = suite_config.load_config(args.config or settings["config_file"])
    if not isinstance(config, dict):
        _fail("Invalid test configuration: top level is not an object", 3, args.json)
    platform = args.platform or settings["platform"] or selection.detect_platform()
    logger.debug("Using platform %s", platform)

    if args.command == "paths":
        handle_paths(
            config, section=args.section, json_output=args.json, quiet=args.quiet
        )
    elif args.command == "partition":
        handle_partition(config, platform, json_output=args.json, quiet=args.quiet)
    elif args.command == "ignore":
        handle_ignore(config, json_output=args.json, quiet=args.quiet)
    elif args.command == "ignored":
        handle_ignored(config, args.paths, json_output=args.json, quiet=args.quiet)
    elif args.command == "check":
        handle_check(config, json_output=args.json, quiet=args.quiet)
    elif args.command == "discover":
        node_test_dir: Optional[str] = args.node_test_dir or settings["node_test_dir"]
        if not node_test_dir:
            _fail(
                "No Node test directory given (pass it or set node_test_dir).",
                3,
                args.json,
            )
        handle_discover(
            config, node_test_dir, json_output=args.json, quiet=args.quiet
        )


def main() -> None:
    """
    The main entry point for the command-line interface.

    This function sets up the argument parser, loads the settings and the
    test configuration, and dispatches to the appropriate handler. Failures
    to read or parse the inputs are reported and end the process:
    exit code 2 for a missing file, 3 for unparsable content.
    """
    parser = argparse.ArgumentParser(
        description="Inspect the Node.js compatibility test configuration.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to the test configuration (defaults to the bundled config.json).",
    )
    parser.add_argument(
        "--settings",
        metavar="PATH",
        help="Path to a YAML settings file.",
    )
    parser.add_argument(
        "--platform",
        choices=["linux", "darwin", "windows"],
        help="Compute results for this platform instead of the host one.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce non-essential output.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug information to stderr.",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        help="The action to perform. Available commands are:",
    )

    def _add_json(p: argparse.ArgumentParser) -> None:
        p.add_argument("--json", action="store_true", help="Output results in JSON.")

    # --- Paths Command ---
    paths_parser = subparsers.add_parser(
        "paths", help="List composite test paths of a configuration section."
    )
    paths_parser.add_argument(
        "--section",
        choices=list(suite_config.CONFIG_SECTIONS),
        default="tests",
        help="The section to list (default: tests).",
    )
    _add_json(paths_parser)

    # --- Partition Command ---
    partition_parser = subparsers.add_parser(
        "partition", help="Split the tests into parallel and sequential groups."
    )
    _add_json(partition_parser)

    # --- Ignore Command ---
    ignore_parser = subparsers.add_parser(
        "ignore", help="List the patterns of files excluded from regeneration."
    )
    _add_json(ignore_parser)

    # --- Ignored Command ---
    ignored_parser = subparsers.add_parser(
        "ignored", help="Tell which of the given paths match the ignore list."
    )
    ignored_parser.add_argument(
        "paths", nargs="+", metavar="PATH", help="Composite test paths to check."
    )
    _add_json(ignored_parser)

    # --- Check Command ---
    check_parser = subparsers.add_parser(
        "check", help="Check the configuration conventions."
    )
    _add_json(check_parser)

    # --- Discover Command ---
    discover_parser = subparsers.add_parser(
        "discover", help="List upstream files that would be regenerated."
    )
    discover_parser.add_argument(
        "node_test_dir",
        nargs="?",
        help="The test directory of a Node.js checkout.",
    )
    _add_json(discover_parser)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        _dispatch(args)
    except FileNotFoundError as e:
        _fail(f"'{e.filename}' not found." if e.filename else str(e), 2, args.json)
    except json.JSONDecodeError as e:
        _fail(f"Invalid test configuration: {e}", 3, args.json)
    except yaml.YAMLError as e:
        _fail(f"Invalid settings file: {e}", 3, args.json)
    except re.error as e:
        _fail(f"Invalid pattern '{e.pattern}': {e}", 3, args.json)


if __name__ == "__main__":
    main()
