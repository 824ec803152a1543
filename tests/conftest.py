"""Test configuration for the suite.

Ensures the local package source is importable ahead of any globally
installed version so tests run against the current workspace code.
"""

import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


SAMPLE_CONFIG = {
    "nodeVersion": "18.12.1",
    "ignore": {
        "parallel": ["test-assert.js", "test-buffer-.*\\.js"],
    },
    "tests": {
        "common": ["index.js"],
        "parallel": [
            "test-assert.js",
            "test-buffer-.*\\.js",
            "test-event-emitter-once.js",
            "test-stdin-from-file-spawn.js",
        ],
        "pseudo-tty": ["console-dumb-tty.js"],
        "sequential": ["test-child-process-exit.js"],
    },
    "windowsIgnore": {
        "parallel": ["test-stdin-from-file-spawn.js"],
        "pseudo-tty": ["console-dumb-tty.js"],
    },
    "darwinIgnore": {},
}


@pytest.fixture
def sample_config():
    """A fresh copy of a small but complete test configuration."""
    return json.loads(json.dumps(SAMPLE_CONFIG))


@pytest.fixture
def config_file(tmp_path, sample_config):
    """The sample configuration written to a temporary JSON file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(sample_config))
    return path
