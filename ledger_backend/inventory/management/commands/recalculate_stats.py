# inventory/management/commands/recalculate_stats.py

"""
RECALCULATE PRODUCT ANNUAL STATS (AUTHORITATIVE REBUILD)

Purpose:
- Rebuild ProductAnnualStat rows for one organization and year from the
  posted valuation documents of that year.

Rules:
- Idempotent: rerunning produces the same rows.
- --dry-run runs the full rebuild inside a transaction and rolls it back,
  printing which rows would change.
- --organization may be repeated; omitted means every active organization.
"""

from __future__ import annotations

import uuid

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.decimal_utils import fmt_money, fmt_quantity
from inventory.models import ProductAnnualStat
from inventory.services.valuation import recalculate_stats_for_year
from organizations.models import Organization


def _stat_rows(organization_id, year: int) -> dict:
    rows = ProductAnnualStat.objects.filter(
        organization_id=organization_id, year=year
    ).select_related("product")
    return {
        row.product_id: (
            row.product.code,
            fmt_quantity(row.purchased_quantity),
            fmt_money(row.purchased_total_amount),
            fmt_quantity(row.sold_quantity),
            fmt_money(row.sold_total_amount),
            fmt_quantity(row.weighted_average_cost),
            fmt_quantity(row.last_cost),
        )
        for row in rows
    }


class Command(BaseCommand):
    help = "Rebuild ProductAnnualStat rows for a year from posted documents."

    def add_arguments(self, parser):
        parser.add_argument(
            "--year",
            type=int,
            required=True,
            help="Calendar year to rebuild (e.g. 2024).",
        )
        parser.add_argument(
            "--organization",
            action="append",
            default=[],
            help="Organization id (repeatable). Default: all active organizations.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would change without saving.",
        )

    def handle(self, *args, **options):
        year = int(options["year"])
        dry_run = bool(options.get("dry_run"))
        try:
            org_ids = {
                uuid.UUID(o.strip())
                for o in options.get("organization") or []
                if o.strip()
            }
        except ValueError as exc:
            raise CommandError(f"Invalid --organization id: {exc}") from exc

        if year < 1900 or year > 9999:
            raise CommandError(f"Invalid --year {year}.")

        orgs = Organization.objects.filter(is_active=True)
        if org_ids:
            orgs = Organization.objects.filter(id__in=org_ids)
            if orgs.count() != len(org_ids):
                raise CommandError("One or more --organization ids do not exist.")

        self.stdout.write(f"Recalculating product stats for year={year} ...")
        if dry_run:
            self.stdout.write("DRY RUN: no database changes will be saved.\n")

        total_docs = 0
        total_changed = 0

        for org in orgs.order_by("name"):
            with transaction.atomic():
                before = _stat_rows(org.id, year)
                processed = recalculate_stats_for_year(
                    organization_id=org.id, year=year
                )
                after = _stat_rows(org.id, year)

                changed = [
                    pid
                    for pid in before.keys() | after.keys()
                    if before.get(pid) != after.get(pid)
                ]
                for pid in changed:
                    old, new = before.get(pid), after.get(pid)
                    code = (new or old)[0]
                    self.stdout.write(
                        f"CHANGE org={org.name} product={code} "
                        f"before={old[1:] if old else None} "
                        f"after={new[1:] if new else None}"
                    )

                if dry_run:
                    transaction.set_rollback(True)

            total_docs += processed
            total_changed += len(changed)
            self.stdout.write(
                f"{org.name}: documents={processed} rows_changed={len(changed)}"
            )

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Documents processed: {total_docs}")
        self.stdout.write(f"Rows changed:        {total_changed}")

        if dry_run:
            self.stdout.write("\nDRY RUN complete (no changes saved).")
