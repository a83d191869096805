"""Container/leaf classification of OFX tag names.

A container nests other tags and never holds text directly; a leaf holds
only text. Anything that is not a known container is a leaf.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Optional

DEFAULT_CONTAINER_TAGS: FrozenSet[str] = frozenset({
    "OFX",
    "SIGNONMSGSRSV1",
    "SONRS",
    "STATUS",
    "FI",
    "BANKMSGSRSV1",
    "STMTTRNRS",
    "STMTRS",
    "BANKACCTFROM",
    "BANKTRANLIST",
    "STMTTRN",
    "LEDGERBAL",
    "AVAILBAL",
})


class TagKind(Enum):
    """Two-valued classification of a tag name."""

    CONTAINER = "container"
    LEAF = "leaf"


def local_name(name: str) -> str:
    """Strip a namespace prefix from a qualified tag name."""
    return name.rsplit(":", 1)[-1]


def classify(name: str) -> TagKind:
    """Classify a tag name against the default container set."""
    if local_name(name) in DEFAULT_CONTAINER_TAGS:
        return TagKind.CONTAINER
    return TagKind.LEAF


def is_container(name: str) -> bool:
    return classify(name) is TagKind.CONTAINER


class TagClassifier:
    """Classifier over the default container set plus user extensions.

    Instances are immutable and can be shared between repair passes.
    """

    def __init__(
        self,
        extra_container_tags: Optional[Iterable[str]] = None,
        root_tag: str = "OFX",
    ) -> None:
        tags = set(DEFAULT_CONTAINER_TAGS)
        tags.update(extra_container_tags or ())
        # The document root always nests everything else
        tags.add(root_tag)
        self._container_tags: FrozenSet[str] = frozenset(tags)

    @property
    def container_tags(self) -> FrozenSet[str]:
        return self._container_tags

    def classify(self, name: str) -> TagKind:
        """Classify a tag name, ignoring any namespace prefix."""
        if local_name(name) in self._container_tags:
            return TagKind.CONTAINER
        return TagKind.LEAF

    def is_container(self, name: str) -> bool:
        return self.classify(name) is TagKind.CONTAINER

    def is_leaf(self, name: str) -> bool:
        return self.classify(name) is TagKind.LEAF
