import datetime
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from core.tests.builders import (
    allocate,
    ctx_for,
    make_account,
    make_document,
    make_installment,
    make_org,
    make_payment,
    purchase_type,
    sale_type,
)
from finance import operations
from finance.models import Payment, PaymentMapping
from finance.services.payment_service import (
    InstallmentStatus,
    get_installments_for_allocation,
    installment_status,
)

TODAY = datetime.date(2024, 6, 1)


class InstallmentStatusTests(SimpleTestCase):
    """
    GUARANTEES:
    - PAID when nothing is left, whatever the due date
    - OVERDUE beats PARTIAL once the due date has passed
    """

    def _status(self, paid, due):
        return installment_status(
            amount=Decimal("100.00"), paid=Decimal(paid), due_date=due, today=TODAY
        )

    def test_statuses(self):
        past = datetime.date(2024, 5, 1)
        future = datetime.date(2024, 7, 1)

        self.assertEqual(self._status("100.00", past), InstallmentStatus.PAID)
        self.assertEqual(self._status("40.00", past), InstallmentStatus.OVERDUE)
        self.assertEqual(self._status("0.00", past), InstallmentStatus.OVERDUE)
        self.assertEqual(self._status("40.00", future), InstallmentStatus.PARTIAL)
        self.assertEqual(self._status("0.00", future), InstallmentStatus.PENDING)
        self.assertEqual(self._status("0.00", TODAY), InstallmentStatus.PENDING)


class PaymentReadModelTests(TestCase):
    """
    Tests for payment deletion and the allocation read models.

    GUARANTEES:
    - deleting a payment releases its allocations (residuals grow back)
    - paid / residual / status are derived from allocations on every read
    - reads never cross tenants
    """

    def setUp(self):
        self.org = make_org()
        self.ctx = ctx_for(self.org)
        self.account = make_account(self.org)
        self.doc = make_document(self.org, sale_type(self.org), number="FT-7")

        self.inst_a = make_installment(
            self.doc, "100.00", due_date=datetime.date(2024, 5, 1)
        )
        self.inst_b = make_installment(
            self.doc, "200.00", due_date=datetime.date(2024, 7, 1)
        )

    # --------------------------------------------------
    # delete_payment
    # --------------------------------------------------

    def test_delete_payment_releases_allocations(self):
        payment = make_payment(self.org, self.account, "150.00")
        allocate(payment, self.inst_a, "100.00")
        allocate(payment, self.inst_b, "50.00")

        result = operations.delete_payment(self.ctx, payment_id=payment.id)

        self.assertTrue(result.success, result.error)
        self.assertEqual(len(result.data["released"]), 2)
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(PaymentMapping.objects.exists())

        rows = {
            r["id"]: r
            for r in get_installments_for_allocation(
                organization_id=self.org.id, today=TODAY
            )
        }
        self.assertEqual(rows[str(self.inst_a.id)]["residual"], "100.00")
        self.assertEqual(rows[str(self.inst_b.id)]["residual"], "200.00")

    def test_delete_foreign_payment_not_found(self):
        other = make_org("Other")
        payment = make_payment(other, make_account(other, "Cassa"), "10.00")

        result = operations.delete_payment(self.ctx, payment_id=payment.id)

        self.assertEqual(result.code, "not_found")
        self.assertTrue(Payment.objects.filter(id=payment.id).exists())

    def test_delete_requires_write(self):
        payment = make_payment(self.org, self.account, "10.00")
        result = operations.delete_payment(
            ctx_for(self.org, can_write=False), payment_id=payment.id
        )
        self.assertEqual(result.code, "forbidden")

    # --------------------------------------------------
    # list_payments
    # --------------------------------------------------

    def test_list_payments_newest_first_with_allocation_totals(self):
        older = make_payment(
            self.org, self.account, "100.00", date=datetime.date(2024, 1, 1)
        )
        newer = make_payment(
            self.org, self.account, "300.00", date=datetime.date(2024, 2, 1)
        )
        allocate(newer, self.inst_b, "120.00")

        rows = operations.list_payments(self.ctx).data

        self.assertEqual([r["id"] for r in rows], [str(newer.id), str(older.id)])
        self.assertEqual(rows[0]["allocated_amount"], "120.00")
        self.assertEqual(rows[0]["unallocated_amount"], "180.00")
        self.assertEqual(rows[0]["account_name"], "Banca")
        self.assertEqual(rows[1]["allocated_amount"], "0.00")

    def test_list_payments_filters_direction_and_limit(self):
        make_payment(self.org, self.account, "1.00")
        make_payment(self.org, self.account, "2.00", direction=Payment.Direction.OUTFLOW)
        make_payment(self.org, self.account, "3.00", direction=Payment.Direction.OUTFLOW)

        outflows = operations.list_payments(self.ctx, direction="outflow").data
        self.assertEqual(len(outflows), 2)
        self.assertTrue(all(r["direction"] == "OUTFLOW" for r in outflows))

        self.assertEqual(len(operations.list_payments(self.ctx, limit="1").data), 1)

    def test_list_payments_rejects_bad_input(self):
        self.assertEqual(
            operations.list_payments(self.ctx, direction="SIDEWAYS").code,
            "validation_error",
        )
        for limit in ("abc", "0", "-3"):
            with self.subTest(limit=limit):
                self.assertEqual(
                    operations.list_payments(self.ctx, limit=limit).code,
                    "validation_error",
                )

    def test_list_payments_is_tenant_scoped(self):
        other = make_org("Other")
        make_payment(other, make_account(other, "Cassa"), "10.00")
        self.assertEqual(operations.list_payments(self.ctx).data, [])

    # --------------------------------------------------
    # get_installments_for_allocation
    # --------------------------------------------------

    def test_installments_with_derived_fields(self):
        payment = make_payment(self.org, self.account, "500.00")
        allocate(payment, self.inst_a, "40.00")
        allocate(payment, self.inst_b, "200.00")

        rows = get_installments_for_allocation(organization_id=self.org.id, today=TODAY)

        self.assertEqual([r["id"] for r in rows], [str(self.inst_a.id), str(self.inst_b.id)])
        a, b = rows
        self.assertEqual(a["paid_amount"], "40.00")
        self.assertEqual(a["residual"], "60.00")
        self.assertEqual(a["status"], InstallmentStatus.OVERDUE)
        self.assertEqual(a["document_number"], "FT-7")
        self.assertEqual(a["document_direction"], "SALE")
        self.assertEqual(b["residual"], "0.00")
        self.assertEqual(b["status"], InstallmentStatus.PAID)

    def test_open_only_hides_settled(self):
        payment = make_payment(self.org, self.account, "200.00")
        allocate(payment, self.inst_b, "200.00")

        rows = get_installments_for_allocation(
            organization_id=self.org.id, open_only=True, today=TODAY
        )
        self.assertEqual([r["id"] for r in rows], [str(self.inst_a.id)])

    def test_installments_report_purchase_direction(self):
        purchase_doc = make_document(self.org, purchase_type(self.org), number="FF-1")
        make_installment(purchase_doc, "10.00", due_date=datetime.date(2024, 8, 1))

        rows = operations.get_installments_for_allocation(self.ctx).data
        self.assertEqual(rows[-1]["document_direction"], "PURCHASE")

    def test_installments_limit(self):
        rows = operations.get_installments_for_allocation(self.ctx, limit=1).data
        self.assertEqual(len(rows), 1)
