"""The set of bundles declared for one run."""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from bundlesync.core.descriptor import BundleDescriptor, BundleFormatError, decode_bundle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BundleRegistry:
    """Deduplicated, first-seen ordered bundle descriptors.

    Identifiers that failed to decode are kept in ``rejected`` so the caller can
    report them; they never take part in sync or clean.
    """

    descriptors: tuple[BundleDescriptor, ...]
    rejected: tuple[BundleFormatError, ...] = ()

    def __iter__(self) -> Iterator[BundleDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def project_names(self) -> frozenset[str]:
        """Directory names owned by the declared bundles."""
        return frozenset(descriptor.project for descriptor in self.descriptors)


def build_registry(declarations: Iterable[str]) -> BundleRegistry:
    """Decode raw declarations into a registry.

    Uniqueness is on repo_path, compared case-insensitively; the first
    declaration wins and later ones are dropped without a report.
    """
    descriptors: list[BundleDescriptor] = []
    rejected: list[BundleFormatError] = []
    seen: set[str] = set()

    for raw in declarations:
        try:
            descriptor = decode_bundle(raw)
        except BundleFormatError as e:
            rejected.append(e)
            continue

        key = descriptor.repo_path.casefold()
        if key in seen:
            logger.debug("Dropping duplicate declaration %r", raw)
            continue
        seen.add(key)
        descriptors.append(descriptor)

    return BundleRegistry(descriptors=tuple(descriptors), rejected=tuple(rejected))
