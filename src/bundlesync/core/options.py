"""Per-invocation options."""

import re
from dataclasses import dataclass

from bundlesync.core.global_config import DEFAULT_MAX_PARALLEL

MATCH_ALL = re.compile(".")


@dataclass(frozen=True)
class SyncOptions:
    """What one run should do, built once from command-line flags.

    filter_pattern is searched (not anchored) in each bundle's owner/project.
    dry_run only affects the clean pass.
    """

    update: bool = False
    filter_pattern: re.Pattern[str] = MATCH_ALL
    clean: bool = False
    dry_run: bool = False
    max_parallel: int = DEFAULT_MAX_PARALLEL
