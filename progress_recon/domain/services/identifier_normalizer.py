"""
Identifier Normalizer - Canonical project codes from hand-entered fields.

Project codes reach the engine in several shapes:
- A base code alone ('P5067'), from records that predate sub-codes
- A base code plus a sub-code ('P5067' + '01', '-01' or 'P5067-01')
- An explicit full code ('P5067-01')

This module builds the canonical full code for a project and extracts the
candidate codes carried by an Activity or KPI record.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS: Tuple[str, ...] = ("-",)
DEFAULT_SEPARATOR = "-"


def _clean(value: Any) -> str:
    """Stringify and strip; None becomes ''."""
    if value is None:
        return ""
    return str(value).strip()


def canonical_full_code(
    code: Any,
    sub_code: Any,
    separators: Iterable[str] = DEFAULT_SEPARATORS,
    default_separator: str = DEFAULT_SEPARATOR,
) -> str:
    """
    Build the canonical full code from a base code and optional sub-code.

    Rules:
    - Empty sub-code -> code
    - Sub-code already starting with the code (case-insensitive) -> sub-code
    - Sub-code starting with a separator -> code + sub-code
    - Otherwise -> code + default separator + sub-code

    Examples:
        >>> canonical_full_code('P5067', '')
        'P5067'
        >>> canonical_full_code('P5067', 'p5067-01')
        'p5067-01'
        >>> canonical_full_code('P5067', '-01')
        'P5067-01'
        >>> canonical_full_code('P5067', '01')
        'P5067-01'
    """
    code = _clean(code)
    sub = _clean(sub_code)

    if not sub:
        return code
    if not code:
        return sub
    if sub.upper().startswith(code.upper()):
        return sub
    if sub[0] in tuple(separators):
        return code + sub
    return code + default_separator + sub


def split_code(code: Any, separators: Iterable[str] = DEFAULT_SEPARATORS) -> Tuple[str, str]:
    """
    Split a code on its last separator into (base, sub).

    A code without a separator (or with only a leading one) has no sub part.
    """
    text = _clean(code)
    index = max((text.rfind(sep) for sep in separators), default=-1)
    if index <= 0:
        return text, ""
    return text[:index], text[index + 1:]


class CandidateCodes(frozenset):
    """
    Candidate codes of one record.

    Behaves as a plain frozenset of codes. `has_full_code` is True when the
    record itself carries a full code or a sub-code, which keeps it from
    matching a sub-coded project through the bare base code alone.
    """

    def __new__(cls, codes: Iterable[str] = (), has_full_code: bool = False):
        instance = super().__new__(cls, codes)
        instance.has_full_code = has_full_code
        return instance

    def __repr__(self) -> str:
        return f"CandidateCodes({sorted(self)!r}, has_full_code={self.has_full_code})"


def extract_codes(
    record: Any,
    separators: Iterable[str] = DEFAULT_SEPARATORS,
    default_separator: str = DEFAULT_SEPARATOR,
) -> CandidateCodes:
    """
    Extract every usable project code carried by an Activity or KPI record.

    Candidates:
    1. The explicit full code field
    2. The bare base code field
    3. The canonical combination of base code + sub-code

    Every candidate is kept in its original and upper-cased form. Records
    without any usable code give an empty set and stay unmatched.
    """
    full_code = _clean(getattr(record, 'project_full_code', None))
    base_code = _clean(getattr(record, 'project_code', None))
    sub_code = _clean(getattr(record, 'project_sub_code', None))

    candidates = [full_code, base_code]
    if sub_code:
        candidates.append(canonical_full_code(base_code, sub_code, separators, default_separator))

    codes = set()
    for candidate in candidates:
        if candidate:
            codes.add(candidate)
            codes.add(candidate.upper())
    return CandidateCodes(codes, has_full_code=bool(full_code or sub_code))


@dataclass(frozen=True)
class ProjectIdentity:
    """Upper-cased identity of a project, as compared by the code matcher."""
    code: str
    sub_code: str
    full_code: str
    separators: Tuple[str, ...] = DEFAULT_SEPARATORS
    default_separator: str = DEFAULT_SEPARATOR

    @property
    def has_sub_code(self) -> bool:
        return bool(self.sub_code)


def project_identity(
    project: Any,
    separators: Iterable[str] = DEFAULT_SEPARATORS,
    default_separator: str = DEFAULT_SEPARATOR,
) -> ProjectIdentity:
    """Build the comparison identity for a Project."""
    separators = tuple(separators)
    code = _clean(getattr(project, 'code', None))
    sub_code = _clean(getattr(project, 'sub_code', None))
    full_code = canonical_full_code(code, sub_code, separators, default_separator)
    return ProjectIdentity(
        code=code.upper(),
        sub_code=sub_code.upper(),
        full_code=full_code.upper(),
        separators=separators,
        default_separator=default_separator,
    )


def normalize_zone(zone: Any, project_code: Optional[str] = None) -> str:
    """
    Lower-cased zone with any leading project-code prefix removed.

    Examples:
        >>> normalize_zone('P5067 - Zone A', 'P5067')
        'zone a'
        >>> normalize_zone(' Zone B ')
        'zone b'
    """
    text = _clean(zone)
    code = _clean(project_code)
    if code and text.upper().startswith(code.upper()):
        text = text[len(code):].lstrip(" -_/")
    return text.strip().lower()


def is_unzoned(zone: Any, sentinels: Iterable[str]) -> bool:
    """True for empty zones and 'not zoned' sentinel values."""
    text = _clean(zone).lower()
    if not text:
        return True
    return text in {_clean(s).lower() for s in sentinels}
