import datetime
from decimal import Decimal

from django.test import TestCase

from core.tests.builders import (
    allocate,
    ctx_for,
    make_account,
    make_document,
    make_installment,
    make_org,
    make_payment,
    make_product,
    make_warehouse,
    purchase_type,
)
from documents import operations
from documents.models import Document, DocumentType, Installment
from finance.models import Payment, PaymentMapping
from inventory.models import ProductAnnualStat, StockMovement
from inventory.movement_kinds import MovementKind
from inventory.services.stock_ledger import current_stock


class PostingWorkflowTests(TestCase):
    """
    Tests for posting, editing and deleting documents.

    GUARANTEES:
    - posting writes movements + stats + posted_at in one transaction
    - a misconfigured document type aborts posting with zero writes
    - editing a posted document reverts the old contribution and applies the new
    - deleting a posted document reverts its stats and cascades
    """

    def setUp(self):
        self.org = make_org()
        self.ctx = ctx_for(self.org)
        self.wh = make_warehouse(self.org)
        self.product = make_product(self.org, default_warehouse=self.wh)
        self.purchase = purchase_type(self.org)
        self.document = make_document(
            self.org,
            self.purchase,
            number="OF-1",
            date=datetime.date(2024, 3, 1),
            lines=[{"product": self.product, "quantity": "10", "unit_price": "5.00"}],
        )

    def _stock(self):
        return current_stock(organization_id=self.org.id, product_id=self.product.id)

    def _stat(self, year=2024):
        return ProductAnnualStat.objects.filter(
            organization=self.org, product=self.product, year=year
        ).first()

    # --------------------------------------------------
    # Post
    # --------------------------------------------------

    def test_post_moves_stock_and_applies_stats(self):
        result = operations.post_document(self.ctx, document_id=self.document.id)

        self.assertTrue(result.success, result.error)
        self.assertEqual(len(result.data["movement_ids"]), 1)
        self.assertEqual(result.data["stats_lines"], 1)
        self.assertEqual(self._stock(), Decimal("10"))
        self.assertEqual(self._stat().weighted_average_cost, Decimal("5.0000"))

        self.document.refresh_from_db()
        self.assertTrue(self.document.is_posted)

        movement = StockMovement.objects.get()
        self.assertEqual(movement.kind, MovementKind.SUPPLIER_RECEIPT)
        self.assertEqual(movement.document_number, "OF-1")

    def test_post_twice_rejected(self):
        operations.post_document(self.ctx, document_id=self.document.id)
        result = operations.post_document(self.ctx, document_id=self.document.id)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "validation_error")
        self.assertEqual(StockMovement.objects.count(), 1)

    def test_invalid_stock_sign_aborts_with_zero_writes(self):
        DocumentType.objects.filter(id=self.purchase.id).update(operation_sign_stock=2)

        result = operations.post_document(self.ctx, document_id=self.document.id)

        self.assertFalse(result.success)
        self.assertEqual(result.code, "configuration_error")
        self.assertEqual(StockMovement.objects.count(), 0)
        self.assertFalse(ProductAnnualStat.objects.exists())
        self.document.refresh_from_db()
        self.assertFalse(self.document.is_posted)

    def test_invalid_valuation_sign_aborts_before_movements(self):
        DocumentType.objects.filter(id=self.purchase.id).update(
            operation_sign_valuation=5
        )

        result = operations.post_document(self.ctx, document_id=self.document.id)

        self.assertEqual(result.code, "configuration_error")
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_foreign_product_line_rolls_back_whole_document(self):
        foreign = make_product(make_org("Other"), "FOREIGN")
        document = make_document(
            self.org,
            self.purchase,
            number="OF-2",
            lines=[
                {"product": self.product, "quantity": "1", "unit_price": "1"},
                {"product": foreign, "quantity": "1", "unit_price": "1"},
            ],
        )

        result = operations.post_document(self.ctx, document_id=document.id)

        self.assertEqual(result.code, "not_found")
        self.assertEqual(StockMovement.objects.count(), 0)
        self.assertFalse(ProductAnnualStat.objects.exists())

    def test_read_only_context_cannot_post(self):
        result = operations.post_document(
            ctx_for(self.org, can_write=False), document_id=self.document.id
        )
        self.assertEqual(result.code, "forbidden")

    def test_other_tenant_cannot_post(self):
        result = operations.post_document(
            ctx_for(make_org("Other")), document_id=self.document.id
        )
        self.assertEqual(result.code, "not_found")

    # --------------------------------------------------
    # Edit
    # --------------------------------------------------

    def test_edit_posted_document_reverts_then_applies(self):
        operations.post_document(self.ctx, document_id=self.document.id)

        result = operations.update_document_lines(
            self.ctx,
            document_id=self.document.id,
            lines=[{"product_id": self.product.id, "quantity": "4", "unit_price": "6.00"}],
        )

        self.assertTrue(result.success, result.error)
        self.assertEqual(self._stock(), Decimal("4"))

        stat = self._stat()
        self.assertEqual(stat.purchased_quantity, Decimal("4.0000"))
        self.assertEqual(stat.purchased_total_amount, Decimal("24.00"))
        self.assertEqual(stat.weighted_average_cost, Decimal("6.0000"))
        self.assertEqual(stat.last_cost, Decimal("6.0000"))

        # original + compensating + new; nothing deleted
        kinds = list(
            StockMovement.objects.order_by("created_at").values_list("kind", flat=True)
        )
        self.assertEqual(len(kinds), 3)
        self.assertIn(MovementKind.INVENTORY_ADJUSTMENT, kinds)

    def test_edit_moving_document_to_previous_year(self):
        operations.post_document(self.ctx, document_id=self.document.id)

        operations.update_document_lines(
            self.ctx,
            document_id=self.document.id,
            lines=[{"product_id": self.product.id, "quantity": "10", "unit_price": "5.00"}],
            date=datetime.date(2023, 12, 20),
        )

        self.assertEqual(self._stat(2024).purchased_quantity, Decimal("0"))
        self.assertEqual(self._stat(2023).purchased_quantity, Decimal("10.0000"))
        self.assertEqual(self._stock(), Decimal("10"))

    def test_edit_unposted_document_only_replaces_lines(self):
        result = operations.update_document_lines(
            self.ctx,
            document_id=self.document.id,
            lines=[
                {"product_id": self.product.id, "quantity": "2", "unit_price": "3.335"},
                {"description": "Trasporto", "quantity": "1", "unit_price": "15"},
            ],
        )

        self.assertTrue(result.success, result.error)
        lines = list(self.document.lines.order_by("position"))
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0].net_amount, Decimal("6.67"))
        self.assertIsNone(lines[1].product_id)
        self.assertEqual(StockMovement.objects.count(), 0)
        self.assertFalse(ProductAnnualStat.objects.exists())

    def test_edit_rejects_float_quantity(self):
        result = operations.update_document_lines(
            self.ctx,
            document_id=self.document.id,
            lines=[{"product_id": self.product.id, "quantity": 1.5, "unit_price": "1"}],
        )
        self.assertEqual(result.code, "validation_error")
        self.assertEqual(self.document.lines.count(), 1)

    # --------------------------------------------------
    # Delete
    # --------------------------------------------------

    def test_delete_posted_document_reverts_and_cascades(self):
        operations.post_document(self.ctx, document_id=self.document.id)
        installment = make_installment(self.document, "50.00")
        account = make_account(self.org)
        payment = make_payment(
            self.org, account, "50.00", direction=Payment.Direction.OUTFLOW
        )
        allocate(payment, installment, "50.00")

        result = operations.delete_document(self.ctx, document_id=self.document.id)

        self.assertTrue(result.success, result.error)
        self.assertEqual(result.data["stats_lines_reverted"], 1)
        self.assertFalse(Document.objects.filter(id=self.document.id).exists())
        self.assertFalse(Installment.objects.exists())
        self.assertFalse(PaymentMapping.objects.exists())
        self.assertTrue(Payment.objects.filter(id=payment.id).exists())
        self.assertEqual(StockMovement.objects.count(), 0)
        self.assertEqual(self._stat().purchased_quantity, Decimal("0"))
