"""Read bundle declarations out of a Vim script.

Recognised forms, one per line:

    Bundle 'owner/project'
    Bundle('owner/project:branch')
    BundleLazy('owner/project')
    Bundles('owner/a', 'owner/b', ...)

Lines whose first non-blank character is a double quote are comments. A
Bundles() call split over several lines is skipped with a warning.
"""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_COMMENT = re.compile(r'^\s*"')
_BUNDLES_OPEN = re.compile(r"Bundles\s*\(")
_BUNDLES_CALL = re.compile(r"Bundles\s*\((?P<args>.*)\)")
_BUNDLE_CALL = re.compile(r"""Bundle(?!s\s*\()\w*\s*\(?\s*['"](?P<arg>[^ '"]+)""")
_ARG_TOKEN = re.compile(r"""[^ ,'"]+""")


def parse_declarations(text: str) -> list[str]:
    """Extract raw bundle identifiers, deduplicated case-insensitively."""
    found: list[str] = []
    seen: set[str] = set()

    def add(identifier: str) -> None:
        key = identifier.casefold()
        if key not in seen:
            seen.add(key)
            found.append(identifier)

    for lineno, line in enumerate(text.splitlines(), start=1):
        if _COMMENT.match(line) or "Bundle" not in line:
            continue
        many = _BUNDLES_CALL.search(line)
        if many is not None:
            for token in _ARG_TOKEN.findall(many["args"]):
                add(token)
            continue
        if _BUNDLES_OPEN.search(line):
            logger.warning(
                "Line %d: arguments to Bundles() should be on a single line, skipping it",
                lineno,
            )
            continue
        single = _BUNDLE_CALL.search(line)
        if single is not None:
            add(single["arg"])

    return found


def read_declarations(path: Path) -> list[str]:
    """Read the declaration file at path.

    Bytes that are not valid UTF-8 (a latin-1 comment, say) are replaced;
    identifiers themselves are ASCII.

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If the file cannot be read
    """
    return parse_declarations(path.read_text(encoding="utf-8", errors="replace"))
