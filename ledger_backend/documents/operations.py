# documents/operations.py

from __future__ import annotations

from core.context import TenantContext
from core.results import ledger_operation
from documents.services import posting


@ledger_operation
def post_document(ctx: TenantContext, *, document_id) -> dict:
    ctx.require_write("post documents")
    return posting.post_document(
        organization_id=ctx.organization_id,
        document_id=document_id,
        user_id=ctx.user_id,
    )


@ledger_operation
def update_document_lines(ctx: TenantContext, *, document_id, lines, date=None) -> dict:
    ctx.require_write("edit documents")
    return posting.update_document_lines(
        organization_id=ctx.organization_id,
        document_id=document_id,
        lines=lines,
        date=date,
        user_id=ctx.user_id,
    )


@ledger_operation
def delete_document(ctx: TenantContext, *, document_id) -> dict:
    ctx.require_write("delete documents")
    return posting.delete_document(
        organization_id=ctx.organization_id, document_id=document_id
    )
