"""
Loading and checking of the Node.js compatibility test configuration.

The configuration is a JSON document stored next to this module
(`config.json`). Each section maps a test suite, which mirrors a folder of
the upstream `test` directory, to a list of files. Entries may be plain
relative paths or regular expressions matching several files.

Example `config.json`:
{
    "nodeVersion": "18.12.1",
    "ignore": {"parallel": ["test-assert.js"]},
    "tests": {"parallel": ["test-assert.js", "test-buffer-.*\\.js"]},
    "windowsIgnore": {},
    "darwinIgnore": {}
}

Sections:
    ignore: files that are never regenerated by the update tooling. They
            must be listed under `tests` as well.
    tests: files that are pulled from upstream and executed.
    windowsIgnore / darwinIgnore: files skipped on the given platform.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List

# Maps a suite name to its ordered list of file paths or patterns.
TestSuites = Dict[str, List[str]]

# The name of the configuration document shipped with the tooling.
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), CONFIG_FILENAME)

CONFIG_SECTIONS = ("ignore", "tests", "windowsIgnore", "darwinIgnore")

logger = logging.getLogger(__name__)


def load_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Loads the test configuration from a JSON file.

    No schema validation is performed and nothing is recovered: a missing
    file raises FileNotFoundError and malformed JSON raises
    json.JSONDecodeError.

    Args:
        path: The JSON document to read. Defaults to the `config.json`
              shipped alongside this module.

    Returns:
        The parsed configuration document.
    """
    config_path = DEFAULT_CONFIG_PATH if path is None else os.fspath(path)
    logger.debug("Loading test configuration from %s", config_path)
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_suites(config: Dict[str, Any], section: str) -> TestSuites:
    """Return one section of the configuration, or an empty mapping."""
    return config.get(section) or {}


def _problem(section: str, suite: str, entry: str, problem: str) -> Dict[str, str]:
    return {"section": section, "suite": suite, "entry": entry, "problem": problem}


def check_config(config: Dict[str, Any]) -> List[Dict[str, str]]:
    """
    Reports entries that break the configuration conventions.

    Loading never validates the document, so this is the only place the
    conventions are looked at. The checks are:
      - every section is an object whose values are lists of strings;
      - every `ignore` entry is also listed under `tests` for its suite;
      - `nodeVersion` is present.
    A document whose top level is not an object gets a single problem.

    Args:
        config: A configuration document, as returned by `load_config`.

    Returns:
        A list of problem records, empty when the document is clean.
    """
    if not isinstance(config, dict):
        return [_problem("", "", "", "document is not an object")]

    problems: List[Dict[str, str]] = []

    if not config.get("nodeVersion"):
        problems.append(_problem("nodeVersion", "", "", "missing nodeVersion"))

    for section in CONFIG_SECTIONS:
        suites = config.get(section)
        if suites is None:
            continue
        if not isinstance(suites, dict):
            problems.append(_problem(section, "", "", "section is not an object"))
            continue
        for suite, entries in suites.items():
            if not isinstance(entries, list) or not all(
                isinstance(e, str) for e in entries
            ):
                problems.append(
                    _problem(section, suite, "", "suite is not a list of strings")
                )

    tests = config.get("tests")
    ignore = config.get("ignore")
    if isinstance(ignore, dict):
        tests = tests if isinstance(tests, dict) else {}
        for suite, entries in ignore.items():
            if not isinstance(entries, list):
                continue
            listed = tests.get(suite)
            if not isinstance(listed, list):
                listed = []
            for entry in entries:
                if isinstance(entry, str) and entry not in listed:
                    problems.append(
                        _problem("ignore", suite, entry, "not listed in tests")
                    )

    if problems:
        logger.debug("Configuration check found %d problem(s)", len(problems))
    return problems
