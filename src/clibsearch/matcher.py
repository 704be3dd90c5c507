from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .registry import PackageRecord


class Outcome(Enum):
    MATCH = "match"
    NO_MATCH = "no_match"
    ABORT = "abort_record"


Rule = Callable[[Sequence[str], Optional[str]], Outcome]


def substring_rule(terms: Sequence[str], value: Optional[str]) -> Outcome:
    """Case-insensitive containment of any term; a missing value aborts the record."""
    if value is None:
        return Outcome.ABORT
    value = value.lower()
    for term in terms:
        if term in value:
            return Outcome.MATCH
    return Outcome.NO_MATCH


# Evaluated in this order
FIELD_RULES: List[Tuple[str, Callable[[PackageRecord], Optional[str]], Rule]] = [
    ("name", lambda pkg: pkg.name, substring_rule),
    ("description", lambda pkg: pkg.description, substring_rule),
    ("repo", lambda pkg: pkg.repo, substring_rule),
    ("href", lambda pkg: pkg.href, substring_rule),
]


@dataclass(frozen=True)
class QuerySpec:
    terms: Tuple[str, ...] = ()

    @classmethod
    def from_args(cls, args: Iterable[str]) -> "QuerySpec":
        return cls(tuple(a.lower() for a in args))

    def __bool__(self) -> bool:
        return bool(self.terms)


def matches(terms: Union[QuerySpec, Sequence[str]], package: PackageRecord) -> bool:
    """
    True if any term is a substring of any of the package's fields.

    No terms matches everything. A package with any field missing never
    matches, even when an earlier field already matched.
    """
    spec = terms if isinstance(terms, QuerySpec) else QuerySpec.from_args(terms)
    if not spec:
        return True

    matched = False
    for _field, getter, rule in FIELD_RULES:
        outcome = rule(spec.terms, getter(package))
        if outcome is Outcome.ABORT:
            return False
        if outcome is Outcome.MATCH:
            matched = True
    return matched
