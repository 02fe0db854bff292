import uuid

from django.test import TestCase
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APIRequestFactory

from core.tests.builders import make_member, make_org, make_user
from organizations.context import tenant_context_for
from organizations.models import Membership


class TenantContextResolutionTests(TestCase):
    """
    GUARANTEES:
    - the organization comes only from the header + a membership
    - READONLY members get a context without write access
    - unknown, malformed, inactive or foreign organizations are refused
    """

    def setUp(self):
        self.factory = APIRequestFactory()
        self.user = make_user()
        self.org = make_org()

    def _request(self, org_header=None):
        extra = {}
        if org_header is not None:
            extra["HTTP_X_ORGANIZATION_ID"] = org_header
        request = self.factory.get("/", **extra)
        request.user = self.user
        return request

    def test_member_gets_context(self):
        make_member(self.user, self.org, role=Membership.Role.OWNER)

        ctx = tenant_context_for(self._request(str(self.org.id)))

        self.assertEqual(ctx.organization_id, self.org.id)
        self.assertTrue(ctx.can_write)
        self.assertEqual(ctx.user_id, self.user.pk)

    def test_readonly_member_cannot_write(self):
        make_member(self.user, self.org, role=Membership.Role.READONLY)
        ctx = tenant_context_for(self._request(str(self.org.id)))
        self.assertFalse(ctx.can_write)

    def test_refusals(self):
        make_member(self.user, self.org)
        inactive = make_org("Chiusa")
        make_member(self.user, inactive)
        inactive.is_active = False
        inactive.save()

        for header in (None, "", "not-a-uuid", str(uuid.uuid4()), str(inactive.id)):
            with self.subTest(header=header):
                with self.assertRaises(PermissionDenied):
                    tenant_context_for(self._request(header))

    def test_other_users_membership_does_not_count(self):
        make_member(make_user("altro"), self.org)
        with self.assertRaises(PermissionDenied):
            tenant_context_for(self._request(str(self.org.id)))
