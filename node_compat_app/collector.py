from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from .config import load_settings
from .selection import detect_platform, select_test_paths
from .suite_config import load_config


def collect_test_paths(
    settings_path: str | Path | None = None, platform: Optional[str] = None
) -> Dict[str, Any]:
    """Load settings and configuration and return the partitioned test paths."""
    settings = load_settings(settings_path)
    config = load_config(settings["config_file"])
    target = platform or settings["platform"] or detect_platform()
    return select_test_paths(config, target)


if __name__ == "__main__":
    import sys

    cfg = sys.argv[1] if len(sys.argv) > 1 else None
    result = collect_test_paths(cfg)
    for group in ("parallel", "sequential"):
        for path in result[group]:
            print(f"{group}\t{path}")
