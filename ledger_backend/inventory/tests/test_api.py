import uuid

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from core.tests.builders import (
    make_document,
    make_member,
    make_org,
    make_product,
    make_user,
    make_warehouse,
    purchase_type,
)
from documents.services.posting import post_document
from inventory.movement_kinds import MovementKind
from inventory.services.stock_ledger import record_movement
from organizations.models import Membership


class InventoryApiTests(TestCase):
    """
    GUARANTEES:
    - movement listing is tenant-scoped and filterable
    - stock and stats are computed on read
    - recalculation needs write access
    """

    def setUp(self):
        self.org = make_org()
        self.user = make_user()
        make_member(self.user, self.org, role=Membership.Role.OWNER)

        self.wh1 = make_warehouse(self.org, "MAG1")
        self.wh2 = make_warehouse(self.org, "MAG2")
        self.product = make_product(self.org, default_warehouse=self.wh1)

        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.client.credentials(HTTP_X_ORGANIZATION_ID=str(self.org.id))

    def _move(self, qty, warehouse, kind=MovementKind.INITIAL_LOAD):
        return record_movement(
            organization_id=self.org.id,
            product_id=self.product.id,
            warehouse_id=warehouse.id,
            signed_quantity=qty,
            movement_kind=kind,
        )

    def test_current_stock(self):
        self._move("10", self.wh1)
        self._move("2.5", self.wh2)
        url = reverse("inventory-current-stock", args=[self.product.id])

        total = self.client.get(url)
        per_wh = self.client.get(url, {"warehouse": str(self.wh2.id)})

        self.assertEqual(total.status_code, 200)
        self.assertEqual(total.data["stock"], "12.5000")
        self.assertEqual(per_wh.data["stock"], "2.5000")

    def test_movement_list_filters(self):
        self._move("10", self.wh1)
        self._move("-1", self.wh1, kind=MovementKind.INVENTORY_ADJUSTMENT)
        self._move("4", self.wh2)

        other = make_org("Other")
        record_movement(
            organization_id=other.id,
            product_id=make_product(other, "X").id,
            warehouse_id=make_warehouse(other, "W").id,
            signed_quantity="99",
            movement_kind=MovementKind.INITIAL_LOAD,
        )

        everything = self.client.get(reverse("inventory-movements"))
        by_wh = self.client.get(reverse("inventory-movements"), {"warehouse": str(self.wh2.id)})
        by_kind = self.client.get(
            reverse("inventory-movements"), {"kind": MovementKind.INVENTORY_ADJUSTMENT}
        )

        self.assertEqual(everything.data["count"], 3)
        self.assertEqual(by_wh.data["count"], 1)
        self.assertEqual(by_kind.data["count"], 1)
        self.assertEqual(by_kind.data["results"][0]["quantity"], "-1.0000")

    def test_stats_and_recalculate(self):
        document = make_document(
            self.org,
            purchase_type(self.org),
            lines=[{"product": self.product, "quantity": "10", "unit_price": "5.00"}],
        )
        post_document(organization_id=self.org.id, document_id=document.id)

        stats = self.client.get(
            reverse("inventory-product-stats", args=[self.product.id, 2024])
        )
        self.assertEqual(stats.status_code, 200)
        self.assertEqual(stats.data["last_cost"], "5.0000")
        self.assertEqual(stats.data["current_stock"], "10.0000")

        recalc = self.client.post(reverse("inventory-recalculate-stats", args=[2024]))
        self.assertEqual(recalc.status_code, 200)
        self.assertEqual(recalc.data["documents_processed"], 1)

    def test_recalculate_forbidden_for_readonly(self):
        reader = make_user("lettore")
        make_member(reader, self.org, role=Membership.Role.READONLY)
        self.client.force_authenticate(user=reader)

        response = self.client.post(reverse("inventory-recalculate-stats", args=[2024]))
        self.assertEqual(response.status_code, 403)

    def test_stats_for_unknown_product_is_404(self):
        response = self.client.get(
            reverse("inventory-product-stats", args=[uuid.uuid4(), 2024])
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_stats_without_row_report_zeros_and_stock(self):
        self._move("4", self.wh1)

        response = self.client.get(
            reverse("inventory-product-stats", args=[self.product.id, 2023])
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["last_cost"], "0.0000")
        self.assertEqual(response.data["current_stock"], "4.0000")

    def test_yearly_stats_table(self):
        document = make_document(
            self.org,
            purchase_type(self.org),
            lines=[{"product": self.product, "quantity": "10", "unit_price": "5.00"}],
        )
        post_document(organization_id=self.org.id, document_id=document.id)

        response = self.client.get(
            reverse("inventory-stats-list", args=[2024]), {"q": "p001", "per_page": "5"}
        )
        bad_page = self.client.get(reverse("inventory-stats-list", args=[2024]), {"page": "x"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        row = response.data["results"][0]
        self.assertEqual(row["product_code"], "P001")
        self.assertEqual(row["purchased_total_amount"], "50.00")
        self.assertEqual(row["current_stock"], "10.0000")
        self.assertEqual(bad_page.status_code, 400)

    def test_movement_summary(self):
        self._move("10", self.wh1)
        self._move("-1", self.wh1, kind=MovementKind.INVENTORY_ADJUSTMENT)

        response = self.client.get(reverse("inventory-movement-summary"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 2)
        self.assertEqual(response.data["by_kind"][MovementKind.INITIAL_LOAD], 1)
        self.assertIsNotNone(response.data["last_movement_at"])
