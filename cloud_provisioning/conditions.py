"""Attribute conditions for workload identity federation providers.

The attribute condition on a federation provider is the only thing standing
between an unrelated external subject and the service accounts the pool may
impersonate. Conditions are modelled here as exact or prefix matches so that
they render to CEL without ambiguity and can be evaluated locally.
"""

from dataclasses import dataclass
from enum import Enum

from cloud_provisioning.errors import AttributeConditionError

# A prefix must stop at one of these so that "org:acme:" never admits "org:acme-evil:".
PREFIX_DELIMITERS = (":", "/")

_FORBIDDEN_CHARACTERS = ("'", '"', "\\", "\n")


class MatchKind(str, Enum):
    """How an attribute value is compared."""

    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True)
class AttributeCondition:
    """A single precise comparison against a mapped token attribute.

    Attributes:
        attribute: Attribute expression, e.g. ``attribute.repository_owner``
            or ``assertion.sub``.
        value: Expected value or prefix.
        kind: Exact or prefix match.
    """

    attribute: str
    value: str
    kind: MatchKind = MatchKind.EXACT

    def __post_init__(self):
        if not self.attribute or not self.value:
            raise AttributeConditionError("attribute and value must both be non-empty")
        if any(ch in self.value for ch in _FORBIDDEN_CHARACTERS):
            raise AttributeConditionError(
                f"value {self.value!r} contains characters that cannot be quoted safely"
            )
        if self.kind == MatchKind.PREFIX and not self.value.endswith(PREFIX_DELIMITERS):
            raise AttributeConditionError(
                f"prefix {self.value!r} must end with one of {PREFIX_DELIMITERS}"
            )

    @classmethod
    def exact(cls, attribute: str, value: str) -> "AttributeCondition":
        return cls(attribute, value, MatchKind.EXACT)

    @classmethod
    def prefix(cls, attribute: str, value: str) -> "AttributeCondition":
        return cls(attribute, value, MatchKind.PREFIX)

    def expression(self) -> str:
        """Render the condition as a CEL expression."""
        if self.kind == MatchKind.PREFIX:
            return f"{self.attribute}.startsWith('{self.value}')"
        return f"{self.attribute} == '{self.value}'"

    def allows(self, candidate: str | None) -> bool:
        """Evaluate the condition against a candidate attribute value."""
        if candidate is None:
            return False
        if self.kind == MatchKind.PREFIX:
            return candidate.startswith(self.value)
        return candidate == self.value


@dataclass(frozen=True)
class PrincipalSetMatch:
    """The member suffix of a ``principalSet://`` identifier.

    ``PrincipalSetMatch("repository", "liverty-music/backend")`` renders to
    ``attribute.repository/liverty-music/backend`` and only admits subjects
    whose mapped ``attribute.repository`` equals that value.
    """

    attribute: str | None = None
    value: str | None = None

    def __post_init__(self):
        if (self.attribute is None) != (self.value is None):
            raise AttributeConditionError("attribute and value must be given together")
        if self.value is not None and not self.value:
            raise AttributeConditionError("value must be non-empty")

    @classmethod
    def any(cls) -> "PrincipalSetMatch":
        return cls()

    def member_path(self) -> str:
        if self.attribute is None:
            return "*"
        return f"attribute.{self.attribute}/{self.value}"

    def allows(self, subject: str) -> bool:
        """Check whether a principal-set path (``attribute.<name>/<value>``) is covered."""
        if self.attribute is None:
            return True
        return subject == self.member_path()
