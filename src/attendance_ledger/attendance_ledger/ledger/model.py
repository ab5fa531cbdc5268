from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Balance:
    """Entitlement pair: how much is allowed and how much has been consumed."""

    allowed: Decimal
    used: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.allowed - self.used
