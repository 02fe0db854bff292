# core/api.py

"""
HTTP mapping for OperationResult.
"""

from rest_framework import status
from rest_framework.response import Response

from core.results import OperationResult

STATUS_BY_CODE = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "nothing_to_allocate": status.HTTP_400_BAD_REQUEST,
    "mixed_direction": status.HTTP_400_BAD_REQUEST,
    "direction_mismatch": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "invariant_violation": status.HTTP_409_CONFLICT,
    "payment_capacity_exceeded": status.HTTP_409_CONFLICT,
    "residual_exceeded": status.HTTP_409_CONFLICT,
    "conflict": status.HTTP_409_CONFLICT,
    "configuration_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def result_response(result: OperationResult, *, success_status=status.HTTP_200_OK):
    if result.success:
        return Response(result.data, status=success_status)

    return Response(
        {
            "detail": result.error,
            "code": result.code,
            "details": result.details,
            "retryable": result.retryable,
        },
        status=STATUS_BY_CODE.get(result.code, status.HTTP_400_BAD_REQUEST),
    )
