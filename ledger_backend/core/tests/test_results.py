from django.core.exceptions import ValidationError
from django.db import IntegrityError, OperationalError
from django.test import SimpleTestCase

from core.api import result_response
from core.context import TenantContext
from core.exceptions import (
    ConfigurationError,
    NotFoundError,
    PermissionDeniedError,
    ResidualExceededError,
)
from core.results import OperationResult, ledger_operation


@ledger_operation
def _raises(exc):
    raise exc


@ledger_operation
def _returns(value):
    return value


class OperationBoundaryTests(SimpleTestCase):
    """
    GUARANTEES:
    - domain errors become failure results with code + details
    - IntegrityError becomes a retryable conflict
    - infrastructure errors propagate
    """

    def test_success_wraps_data(self):
        result = _returns({"a": 1})
        self.assertTrue(result.success)
        self.assertEqual(result.data, {"a": 1})

    def test_domain_error_becomes_failure(self):
        result = _raises(
            ResidualExceededError("too much", requested="220.01", available="220.00")
        )
        self.assertFalse(result.success)
        self.assertEqual(result.code, "residual_exceeded")
        self.assertEqual(result.details["available"], "220.00")
        self.assertFalse(result.retryable)

    def test_not_found_message_hides_tenant(self):
        result = _raises(NotFoundError("Installment", installment_id="x"))
        self.assertEqual(result.error, "Installment not found or not authorized")

    def test_configuration_error_is_reported(self):
        with self.assertLogs("ledger.operations", level="CRITICAL"):
            result = _raises(ConfigurationError("bad sign", sign="2"))
        self.assertEqual(result.code, "configuration_error")

    def test_django_validation_error(self):
        result = _raises(ValidationError({"code": ["required"]}))
        self.assertEqual(result.code, "validation_error")
        self.assertIn("code", result.error)

    def test_integrity_error_is_retryable_conflict(self):
        result = _raises(IntegrityError("unique"))
        self.assertEqual(result.code, "conflict")
        self.assertTrue(result.retryable)

    def test_infrastructure_error_propagates(self):
        with self.assertRaises(OperationalError):
            _raises(OperationalError("db down"))

    def test_read_only_context_refuses_writes(self):
        ctx = TenantContext(organization_id="org", can_write=False)
        with self.assertRaises(PermissionDeniedError):
            ctx.require_write("post documents")


class ResultResponseTests(SimpleTestCase):
    def test_status_mapping(self):
        cases = {
            "validation_error": 400,
            "forbidden": 403,
            "not_found": 404,
            "residual_exceeded": 409,
            "conflict": 409,
            "configuration_error": 500,
        }
        for code, expected in cases.items():
            with self.subTest(code=code):
                response = result_response(
                    OperationResult(success=False, error="x", code=code)
                )
                self.assertEqual(response.status_code, expected)
                self.assertEqual(response.data["code"], code)

    def test_success_status(self):
        response = result_response(OperationResult.ok({"id": "1"}), success_status=201)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data, {"id": "1"})
