"""Bundle identifiers and their canonical descriptors.

A bundle is declared with a short identifier:

    [host/ | host:]owner/project[:[branch]][/sub/directory]

- ``host/`` selects https, ``host:`` selects ssh; without a host the bundle lives
  on github.com over https.
- ``:branch`` pins a branch; a bare trailing ``:`` pins the branch named after
  the running platform (``linux_amd64``, ``darwin_arm64``, ...).
- A trailing ``/sub/directory`` is accepted and ignored: the whole repository is
  always cloned.
"""

import platform
import re
from dataclasses import dataclass
from enum import Enum

DEFAULT_HOST = "github.com/"

_TOKEN = r"[\w\-.]+"
# An https host must contain a dot, otherwise "owner/project/sub" would parse
# as host "owner" and repository "project/sub".
_HTTPS_HOST = r"[\w\-]+(?:\.[\w\-]+)+/"
_SSH_HOST = rf"{_TOKEN}:"

_BUNDLE_FORMAT = re.compile(
    rf"(?P<host>{_HTTPS_HOST}|{_SSH_HOST})?"
    rf"(?P<repo>{_TOKEN}/{_TOKEN})"
    rf"(?P<pin>:(?P<branch>{_TOKEN})?)?"
    r"(?:/[\w\-.]*)*"
)

# platform.machine() spellings mapped onto the architecture names used in
# platform branch names.
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


class TransportPrefix(Enum):
    """Protocol part of a remote URL."""

    HTTPS = "https://"
    SSH = "git@"


class BundleFormatError(ValueError):
    """Raised when a declared identifier does not follow the bundle grammar."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Wrong bundle format: {raw}")
        self.raw = raw


@dataclass(frozen=True)
class BundleDescriptor:
    """Canonical form of a bundle identifier.

    host_domain keeps its delimiter ("github.com/" or "example.com:") so that the
    remote URL is a plain concatenation.
    """

    transport_prefix: TransportPrefix
    host_domain: str
    repo_path: str
    branch: str = ""

    @property
    def url(self) -> str:
        return self.transport_prefix.value + self.host_domain + self.repo_path

    @property
    def project(self) -> str:
        """Name of the local directory holding the bundle."""
        return self.repo_path.split("/")[1]


def platform_branch() -> str:
    """Branch name standing for the running OS and CPU architecture."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    return f"{system}_{_ARCH_ALIASES.get(machine, machine)}"


def decode_bundle(raw: str) -> BundleDescriptor:
    """Decode a declared identifier into a BundleDescriptor.

    Args:
        raw: Identifier as written in the declaration file

    Returns:
        The canonical descriptor

    Raises:
        BundleFormatError: If the identifier does not match the bundle grammar
    """
    match = _BUNDLE_FORMAT.fullmatch(raw.strip())
    if match is None:
        raise BundleFormatError(raw)

    host = match["host"]
    if host is None:
        transport, host = TransportPrefix.HTTPS, DEFAULT_HOST
    elif host.endswith(":"):
        transport = TransportPrefix.SSH
    else:
        transport = TransportPrefix.HTTPS

    branch = ""
    if match["pin"] is not None:
        branch = match["branch"] or platform_branch()

    return BundleDescriptor(
        transport_prefix=transport,
        host_domain=host,
        repo_path=match["repo"],
        branch=branch,
    )
