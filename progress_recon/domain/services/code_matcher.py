"""
Code Matcher - Attributes Activities and KPI records to projects.

Real data is entered inconsistently: some records predate sub-code adoption,
others carry the full code, others a base code plus sub-code. Matching is an
ordered list of pure rules over the record's candidate codes and the project
identity. A record matches when any candidate satisfies any rule.
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar
import logging

from .identifier_normalizer import (
    DEFAULT_SEPARATOR,
    DEFAULT_SEPARATORS,
    CandidateCodes,
    ProjectIdentity,
    canonical_full_code,
    extract_codes,
    project_identity,
    split_code,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class MatchRule:
    """
    A single matching rule.

    Attributes:
        name: Rule identifier, reported by CodeMatcher.explain()
        priority: Higher = checked first
        predicate: Pure function (upper-cased candidate, identity) -> bool
        bare_records_only: Skipped for records that carry a full code or sub-code
    """
    name: str
    priority: int
    predicate: Callable[[str, ProjectIdentity], bool]
    bare_records_only: bool = False


# =============================================================================
# Rule predicates
# =============================================================================

def exact_full_code(candidate: str, identity: ProjectIdentity) -> bool:
    """Candidate is the project's full code."""
    return candidate == identity.full_code


def legacy_base_code(candidate: str, identity: ProjectIdentity) -> bool:
    """
    Project has a sub-code; legacy record carries only the base code.

    Registered with bare_records_only, so a record that names its own full
    code (e.g. P100-B) never reaches project P100-A through its base code.

    Equality with the base code already means the candidate has no sub part
    beyond the base, even when the base code itself contains a separator.
    """
    return identity.has_sub_code and candidate == identity.code


def composed_full_code(candidate: str, identity: ProjectIdentity) -> bool:
    """Project has a sub-code; candidate rebuilt from its own parts is the full code."""
    if not identity.has_sub_code:
        return False
    base, sub = split_code(candidate, identity.separators)
    if not sub:
        return False
    rebuilt = canonical_full_code(base, sub, identity.separators, identity.default_separator)
    return rebuilt.upper() == identity.full_code


def straight_legacy(candidate: str, identity: ProjectIdentity) -> bool:
    """Project has no sub-code and candidate is its base code."""
    return not identity.has_sub_code and candidate == identity.code


DEFAULT_RULES: Sequence[MatchRule] = (
    MatchRule(name="exact_full_code", priority=40, predicate=exact_full_code),
    MatchRule(name="legacy_base_code", priority=30, predicate=legacy_base_code, bare_records_only=True),
    MatchRule(name="composed_full_code", priority=20, predicate=composed_full_code),
    MatchRule(name="straight_legacy", priority=10, predicate=straight_legacy),
)


class CodeMatcher:
    """
    Decides whether a record's candidate codes refer to a project.

    Rule precedence only affects early exit: the match result is the same
    whatever order the rules run in.

    Stateless apart from the configured separators.
    """

    def __init__(
        self,
        rules: Optional[Iterable[MatchRule]] = None,
        separators: Iterable[str] = DEFAULT_SEPARATORS,
        default_separator: str = DEFAULT_SEPARATOR,
    ):
        self.rules: List[MatchRule] = sorted(
            rules if rules is not None else DEFAULT_RULES,
            key=lambda r: -r.priority,
        )
        self.separators = tuple(separators)
        self.default_separator = default_separator

    def identity_for(self, project) -> ProjectIdentity:
        return project_identity(project, self.separators, self.default_separator)

    def codes_for(self, record) -> CandidateCodes:
        return extract_codes(record, self.separators, self.default_separator)

    def explain(self, codes: Iterable[str], identity: ProjectIdentity) -> Optional[str]:
        """
        Name of the first rule that matched, or None.

        Args:
            codes: Candidate codes extracted from a record. A CandidateCodes
                with has_full_code set skips bare_records_only rules.
            identity: Upper-cased project identity

        Returns:
            Rule name, e.g. 'exact_full_code'
        """
        has_full_code = getattr(codes, "has_full_code", False)
        candidates = sorted({c.strip().upper() for c in codes if c and c.strip()})
        for rule in self.rules:
            if rule.bare_records_only and has_full_code:
                continue
            for candidate in candidates:
                if rule.predicate(candidate, identity):
                    return rule.name
        return None

    def matches(self, codes: Iterable[str], identity: ProjectIdentity) -> bool:
        """True when any candidate satisfies any rule."""
        return self.explain(codes, identity) is not None

    def record_matches(self, record, project) -> bool:
        """Convenience wrapper taking a record and a Project."""
        return self.matches(self.codes_for(record), self.identity_for(project))

    def filter_records(self, records: Iterable[T], project) -> List[T]:
        """
        Subset of records attributed to the project.

        Records without any usable code are never included.
        """
        identity = self.identity_for(project)
        matched = [r for r in records if self.matches(self.codes_for(r), identity)]
        logger.debug(f"Matched {len(matched)} records to project {identity.full_code}")
        return matched
