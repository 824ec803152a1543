"""
Path selection for the Node.js compatibility test suites.

This module turns the configuration loaded by `suite_config` into the lists
the test driver and the update tooling work with:

  - the ignore list, the compiled patterns for files that must not be
    regenerated from upstream;
  - composite test paths, a suite name joined with each of its entries;
  - the parallel/sequential partition of those paths;
  - the per-platform exclusions and a read-only discovery of upstream files.

Ignore entries are used twice: they are joined to the suite name as a path
and the joined text is then compiled as a regular expression. Entries are
therefore not escaped, so `test-.*\\.js` matches a family of files.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
import sys
from typing import Any, Callable, Dict, Iterable, List, Sequence, Set, Tuple

from .suite_config import TestSuites, get_suites

# Always ignored, whatever the configuration says.
DEFAULT_IGNORE_PATTERN = re.compile(r"package\.json")

# Suites whose files are executed. Other folders (common, fixtures, ...) are
# support files that are pulled from upstream but never run directly.
SUITE_NAMES = ("parallel", "internet", "pummel", "sequential", "pseudo-tty")

# Configuration sections holding platform-specific exclusions.
PLATFORM_IGNORE_SECTIONS = {"windows": "windowsIgnore", "darwin": "darwinIgnore"}

logger = logging.getLogger(__name__)


def join_path(*segments: str) -> str:
    """
    Join path segments with `/` and normalize the result.

    Later segments are appended even when they start with a separator, so
    `("parallel", "/test-a.js")` gives `parallel/test-a.js`. Backslashes are
    left alone since entries may hold regex escapes.
    """
    head, *rest = segments
    return posixpath.normpath("/".join([head] + [s.lstrip("/") for s in rest]))


def to_posix_path(path: str) -> str:
    """Return `path` with the host separator replaced by `/`."""
    if os.path.sep == "/":
        return path
    return path.replace(os.path.sep, "/")


def build_ignore_list(config: Dict[str, Any]) -> List[re.Pattern[str]]:
    """
    Builds the list of patterns for files excluded from regeneration.

    The default `package.json` pattern always comes first, followed by one
    pattern per `ignore` entry in configuration order.

    Raises:
        re.error: If a configured entry is not a valid regular expression.
    """
    ignore_list: List[re.Pattern[str]] = [DEFAULT_IGNORE_PATTERN]
    for suite, paths in get_suites(config, "ignore").items():
        for path in paths:
            ignore_list.append(re.compile(join_path(suite, path)))
    logger.debug("Built ignore list with %d pattern(s)", len(ignore_list))
    return ignore_list


def is_ignored(path: str, ignore_list: Iterable[re.Pattern[str]]) -> bool:
    """Return True if any ignore pattern matches somewhere in `path`."""
    normalized = to_posix_path(path)
    return any(pattern.search(normalized) for pattern in ignore_list)


def get_paths_from_test_suites(
    suites: TestSuites, allowed: Sequence[str] = SUITE_NAMES
) -> List[str]:
    """
    Flattens a suite mapping into composite test paths.

    Only suites named in `allowed` contribute; the others are skipped
    without notice. Order follows the mapping, then each suite's list.
    Duplicates are passed through.

    Args:
        suites: A mapping of suite name to file entries, e.g. `config["tests"]`.
        allowed: The suite names to keep.

    Returns:
        A list of paths such as `parallel/test-assert.js`.
    """
    test_paths: List[str] = []
    for suite, paths in suites.items():
        if suite not in allowed:
            continue
        for path in paths:
            test_paths.append(join_path(suite, path))
    return test_paths


def partition(
    items: Iterable[Any], predicate: Callable[[Any], bool]
) -> Tuple[List[Any], List[Any]]:
    """Split items into (matching, non_matching), keeping their order."""
    matching: List[Any] = []
    non_matching: List[Any] = []
    for item in items:
        if predicate(item):
            matching.append(item)
        else:
            non_matching.append(item)
    return matching, non_matching


def detect_platform() -> str:
    """Return 'windows', 'darwin' or 'linux' for the running interpreter."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


def parallel_pattern(platform: str) -> re.Pattern[str]:
    """Return the pattern recognizing parallel test paths on `platform`."""
    if platform == "windows":
        return re.compile(r"^parallel[/\\]")
    return re.compile(r"^parallel/")


# Resolved once for the running process.
PARALLEL_PATTERN = parallel_pattern(detect_platform())


def partition_parallel_test_paths(
    test_paths: Iterable[str], pattern: re.Pattern[str] = PARALLEL_PATTERN
) -> Dict[str, List[str]]:
    """
    Splits test paths into the parallel and sequential groups.

    Paths matching `pattern` (by default, the ones under `parallel/`) may
    run concurrently; everything else runs one at a time.

    Returns:
        A dictionary with the `parallel` and `sequential` lists, each in
        input order.
    """
    parallel, sequential = partition(test_paths, lambda p: bool(pattern.match(p)))
    return {"parallel": parallel, "sequential": sequential}


def get_platform_ignored_paths(config: Dict[str, Any], platform: str) -> Set[str]:
    """Return the composite paths skipped on `platform`."""
    section = PLATFORM_IGNORE_SECTIONS.get(platform)
    if section is None:
        return set()
    return set(get_paths_from_test_suites(get_suites(config, section)))


def select_test_paths(config: Dict[str, Any], platform: str) -> Dict[str, Any]:
    """
    Computes what the test driver runs on `platform`.

    Test paths listed in the platform's ignore section are left out of
    both groups and reported under `skipped`.

    Returns:
        A dictionary with `platform`, `parallel`, `sequential` and `skipped`.
    """
    ignored = get_platform_ignored_paths(config, platform)
    runnable, skipped = partition(
        get_paths_from_test_suites(get_suites(config, "tests")),
        lambda p: p not in ignored,
    )
    groups = partition_parallel_test_paths(runnable, parallel_pattern(platform))
    logger.debug(
        "Selected %d parallel and %d sequential test(s) for %s, skipped %d",
        len(groups["parallel"]),
        len(groups["sequential"]),
        platform,
        len(skipped),
    )
    return {
        "platform": platform,
        "parallel": groups["parallel"],
        "sequential": groups["sequential"],
        "skipped": skipped,
    }


def discover_upstream_tests(
    node_test_dir: str, config: Dict[str, Any]
) -> Dict[str, List[str]]:
    """
    Lists the upstream files the update tooling would pull.

    The `test` directory of a Node.js checkout is walked without modifying
    it. A file is selected when its path relative to its suite folder fully
    matches one of the `tests` entries of that suite. Selected files that
    match the ignore list are kept in place, the rest would be regenerated.

    Args:
        node_test_dir: Path to the `test` directory of a Node.js checkout.
        config: The test configuration.

    Returns:
        A dictionary with sorted `regenerate` and `ignored` lists of
        `/`-separated paths relative to `node_test_dir`.

    Raises:
        FileNotFoundError: If `node_test_dir` is not a directory.
        re.error: If a configured entry is not a valid regular expression.
    """
    if not os.path.isdir(node_test_dir):
        raise FileNotFoundError(f"Node test directory '{node_test_dir}' not found.")

    ignore_list = build_ignore_list(config)
    regenerate: List[str] = []
    ignored: List[str] = []

    for suite, entries in get_suites(config, "tests").items():
        suite_dir = os.path.join(node_test_dir, suite)
        if not os.path.isdir(suite_dir):
            logger.debug("Suite folder %s is missing upstream", suite_dir)
            continue
        patterns = [re.compile(entry) for entry in entries]
        for root, dirs, files in os.walk(suite_dir):
            # Skip hidden directories
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            for name in files:
                if name.startswith("."):
                    continue
                rel = os.path.relpath(os.path.join(root, name), suite_dir)
                rel_norm = to_posix_path(rel)
                if not any(p.fullmatch(rel_norm) for p in patterns):
                    continue
                test_path = f"{suite}/{rel_norm}"
                if is_ignored(test_path, ignore_list):
                    ignored.append(test_path)
                else:
                    regenerate.append(test_path)

    return {"regenerate": sorted(regenerate), "ignored": sorted(ignored)}
