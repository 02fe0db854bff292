from django.test import TestCase

from core.tests.builders import ctx_for, make_account, make_org, make_payment
from finance import operations
from finance.models import FinancialAccount, Payment


class FinancialAccountTests(TestCase):
    """
    GUARANTEES:
    - account names are unique per organization
    - balances are initial + inflows - outflows, computed on read
    - accounts referenced by payments cannot be deleted
    """

    def setUp(self):
        self.org = make_org()
        self.ctx = ctx_for(self.org)

    def _create(self, **fields):
        data = {"name": "Conto corrente", "kind": "BANK", **fields}
        return operations.create_financial_account(self.ctx, **data)

    # --------------------------------------------------
    # Create
    # --------------------------------------------------

    def test_create_normalizes_iban_and_bic(self):
        result = self._create(iban="it60 x054 2811 1010 0000 0123 456", bic_swift="bpmoit22xxx")

        self.assertTrue(result.success, result.error)
        account = FinancialAccount.objects.get(id=result.data["id"])
        self.assertEqual(account.iban, "IT60X0542811101000000123456")
        self.assertEqual(account.bic_swift, "BPMOIT22XXX")

    def test_negative_initial_balance_allowed(self):
        result = self._create(initial_balance="-250.50")
        self.assertTrue(result.success, result.error)

    def test_create_validation(self):
        cases = [
            {"name": ""},
            {"name": "x" * 101},
            {"kind": "SAFE"},
            {"iban": "NOT-AN-IBAN"},
            {"initial_balance": "1.001"},
            {"initial_balance": 1.5},
        ]
        for fields in cases:
            with self.subTest(fields=fields):
                self.assertEqual(self._create(**fields).code, "validation_error")
        self.assertFalse(FinancialAccount.objects.exists())

    def test_duplicate_name_rejected_per_organization(self):
        self.assertTrue(self._create().success)
        self.assertEqual(self._create().code, "validation_error")

        other_ctx = ctx_for(make_org("Other"))
        result = operations.create_financial_account(
            other_ctx, name="Conto corrente", kind="CASH"
        )
        self.assertTrue(result.success, result.error)

    def test_read_only_cannot_create(self):
        result = operations.create_financial_account(
            ctx_for(self.org, can_write=False), name="Cassa", kind="CASH"
        )
        self.assertEqual(result.code, "forbidden")

    # --------------------------------------------------
    # Balances
    # --------------------------------------------------

    def test_balances(self):
        bank = make_account(self.org, "Banca", initial_balance="100.00")
        make_account(self.org, "Cassa")
        make_payment(self.org, bank, "50.00")
        make_payment(self.org, bank, "20.25", direction=Payment.Direction.OUTFLOW)

        rows = {r["name"]: r for r in operations.get_account_balances(self.ctx).data}

        self.assertEqual(rows["Banca"]["total_inflow"], "50.00")
        self.assertEqual(rows["Banca"]["total_outflow"], "20.25")
        self.assertEqual(rows["Banca"]["balance"], "129.75")
        self.assertEqual(rows["Cassa"]["balance"], "0.00")

    def test_inactive_accounts_hidden(self):
        account = make_account(self.org, "Vecchio")
        FinancialAccount.objects.filter(id=account.id).update(is_active=False)
        self.assertEqual(operations.get_account_balances(self.ctx).data, [])

    # --------------------------------------------------
    # Delete
    # --------------------------------------------------

    def test_delete_unused_account(self):
        account = make_account(self.org)
        result = operations.delete_financial_account(self.ctx, account_id=account.id)
        self.assertTrue(result.success, result.error)
        self.assertFalse(FinancialAccount.objects.exists())

    def test_delete_refused_while_payments_exist(self):
        account = make_account(self.org)
        make_payment(self.org, account, "1.00")

        result = operations.delete_financial_account(self.ctx, account_id=account.id)

        self.assertEqual(result.code, "invariant_violation")
        self.assertTrue(FinancialAccount.objects.filter(id=account.id).exists())

    def test_delete_foreign_account_not_found(self):
        other = make_account(make_org("Other"), "Cassa")
        result = operations.delete_financial_account(self.ctx, account_id=other.id)
        self.assertEqual(result.code, "not_found")
