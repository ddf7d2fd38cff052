"""
Project Entity - Identity root for activities and KPI records.

A project is identified by its base code plus an optional sub-code. Both are
entered by hand, so the canonical "full code" is derived rather than stored.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Project:
    """
    Immutable project snapshot read from the external store.

    Attributes:
        code: Base project code (e.g. 'P5067')
        sub_code: Optional sub-code ('01', '-01' or 'P5067-01')
        name: Display name
        contract_amount: Manually entered contract amount, if any
        status: Free-text lifecycle status from the store
        responsible_division: Owning division(s), comma separated
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    code: str = ""
    sub_code: str = ""
    name: str = ""
    contract_amount: Optional[float] = None
    status: str = "active"
    responsible_division: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_code(self) -> str:
        """Canonical full code using the default '-' separator."""
        from ..services.identifier_normalizer import canonical_full_code
        return canonical_full_code(self.code, self.sub_code)

    @property
    def has_sub_code(self) -> bool:
        return bool(self.sub_code and self.sub_code.strip())
