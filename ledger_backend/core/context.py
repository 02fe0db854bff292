# core/context.py

"""
TENANT CONTEXT

Resolved caller identity handed to every ledger operation.
Nothing in the ledger reads an ambient "current organization".
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from core.exceptions import PermissionDeniedError


@dataclass(frozen=True)
class TenantContext:
    organization_id: uuid.UUID
    can_write: bool = False
    user_id: int | None = None

    def require_write(self, action: str = "perform this operation") -> None:
        if not self.can_write:
            raise PermissionDeniedError(
                f"Not allowed to {action}",
                organization_id=str(self.organization_id),
            )
