# organizations/context.py

"""
Request -> TenantContext.

The caller names the organization with the X-Organization-Id header; the
authenticated user must hold a Membership in it.
"""

from __future__ import annotations

import uuid

from rest_framework.exceptions import PermissionDenied

from core.context import TenantContext
from organizations.models import Membership

ORGANIZATION_HEADER = "HTTP_X_ORGANIZATION_ID"


def tenant_context_for(request) -> TenantContext:
    raw = (request.META.get(ORGANIZATION_HEADER) or "").strip()
    if not raw:
        raise PermissionDenied("X-Organization-Id header is required")

    try:
        organization_id = uuid.UUID(raw)
    except ValueError as exc:
        raise PermissionDenied("X-Organization-Id is not a valid id") from exc

    membership = (
        Membership.objects.select_related("organization")
        .filter(
            user_id=request.user.pk,
            organization_id=organization_id,
            organization__is_active=True,
        )
        .first()
    )
    if membership is None:
        raise PermissionDenied("Organization not found or not authorized")

    return TenantContext(
        organization_id=membership.organization_id,
        can_write=membership.can_write,
        user_id=request.user.pk,
    )
