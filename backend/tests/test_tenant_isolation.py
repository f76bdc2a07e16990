# Overview: Pytest coverage for tenant isolation behavior.

"""
Multi-Tenant Isolation Tests

Two accounts (A and B), each with an owner, a service, a client and staff.
These tests prove that:
1. Records of account B cannot be read or changed from account A
2. A foreign id answers 403, an unknown id answers 404
3. List endpoints only ever return the caller's records
4. Denials are written to the security audit trail
"""

import pytest

from salonbook.errors import ForbiddenError, NotFoundError
from salonbook.models import SecurityEvent
from salonbook.services import catalog_service, sale_service, session_service
from salonbook.services.security_service import EVENT_CROSS_TENANT_DENIED, list_security_events
from salonbook.services.tenant_service import (
    require_client_in_account,
    require_sale_in_account,
    require_service_in_account,
    require_staff_in_account,
)


@pytest.fixture
def sale_b(account_b, client_b, service_b):
    return sale_service.create_sale(account_b.id, client_b.id, service_b.id)


class TestTenantServiceHelpers:
    def test_own_records_resolve(self, account_a, client_a, service_a, staff_a):
        assert require_client_in_account(client_a.id, account_a.id).id == client_a.id
        assert require_service_in_account(service_a.id, account_a.id).id == service_a.id
        assert require_staff_in_account(staff_a.id, account_a.id).id == staff_a.id

    def test_foreign_records_are_forbidden(self, account_a, client_b, service_b, staff_b, sale_b):
        with pytest.raises(ForbiddenError):
            require_client_in_account(client_b.id, account_a.id)
        with pytest.raises(ForbiddenError):
            require_service_in_account(service_b.id, account_a.id)
        with pytest.raises(ForbiddenError):
            require_staff_in_account(staff_b.id, account_a.id)
        with pytest.raises(ForbiddenError):
            require_sale_in_account(sale_b.id, account_a.id)

    def test_unknown_records_are_not_found(self, account_a):
        with pytest.raises(NotFoundError):
            require_client_in_account(99999, account_a.id)
        with pytest.raises(NotFoundError):
            require_sale_in_account(99999, account_a.id)

    def test_cross_tenant_access_logs_security_event(self, db_session, account_a, sale_b):
        initial_count = db_session.query(SecurityEvent).filter_by(
            event_type=EVENT_CROSS_TENANT_DENIED
        ).count()

        with pytest.raises(ForbiddenError):
            require_sale_in_account(sale_b.id, account_a.id)

        events = db_session.query(SecurityEvent).filter_by(
            event_type=EVENT_CROSS_TENANT_DENIED
        ).order_by(SecurityEvent.id).all()
        assert len(events) == initial_count + 1
        assert events[-1].account_id == account_a.id
        assert events[-1].success is False
        assert f"Sale {sale_b.id}" in events[-1].reason


class TestCrossTenantOperations:
    def test_sale_for_foreign_client_is_rejected(self, account_a, client_b, service_a):
        with pytest.raises(ForbiddenError):
            sale_service.create_sale(account_a.id, client_b.id, service_a.id)

    def test_sale_for_foreign_service_is_rejected(self, account_a, client_a, service_b):
        with pytest.raises(ForbiddenError):
            sale_service.create_sale(account_a.id, client_a.id, service_b.id)

    def test_payment_on_foreign_sale_is_rejected(self, account_a, sale_b):
        with pytest.raises(ForbiddenError):
            sale_service.create_payment(sale_b.id, account_a.id, 1000, "Cash")
        assert sale_service.get_sale_payments(sale_b.id, sale_b.client.account_id).total_paid_cents == 0

    def test_use_session_on_foreign_sale_is_rejected(self, account_a, sale_b):
        with pytest.raises(ForbiddenError):
            session_service.use_session(sale_b.id, account_a.id)
        assert sale_b.remaining_sessions == 3

    def test_lists_are_scoped(self, account_a, client_a, service_a, sale_b):
        sale_service.create_sale(account_a.id, client_a.id, service_a.id)

        assert all(c.account_id == account_a.id for c in catalog_service.list_clients(account_a.id))
        assert [s.client_id for s in sale_service.list_sales_for_account(account_a.id)] == [client_a.id]
        assert session_service.get_all_sessions(account_a.id) == []

    def test_name_search_does_not_cross_accounts(self, account_a, client_a, client_b):
        assert catalog_service.search_clients_by_name(account_a.id, "Mehmet") == []


class TestCrossTenantHttp:
    def test_foreign_sale_is_403(self, client, headers_a, sale_b):
        resp = client.get(f"/api/sales/{sale_b.id}", headers=headers_a)
        assert resp.status_code == 403
        assert resp.json["success"] is False

    def test_unknown_sale_is_404(self, client, headers_a):
        resp = client.get("/api/sales/99999", headers=headers_a)
        assert resp.status_code == 404

    def test_use_session_on_foreign_sale_is_403(self, client, headers_a, sale_b):
        resp = client.post(f"/api/sales/{sale_b.id}/use-session", headers=headers_a, json={})
        assert resp.status_code == 403

    def test_foreign_client_is_403(self, client, headers_a, client_b):
        resp = client.get(f"/api/clients/{client_b.id}", headers=headers_a)
        assert resp.status_code == 403

    def test_update_foreign_service_is_403(self, client, headers_a, service_b):
        resp = client.patch(f"/api/services/{service_b.id}", headers=headers_a, json={"price_cents": 1})
        assert resp.status_code == 403

    def test_list_endpoints_return_own_records_only(self, client, headers_a, headers_b, client_a, client_b, sale_b):
        clients = client.get("/api/clients", headers=headers_a).json["clients"]
        assert [c["id"] for c in clients] == [client_a.id]

        sales = client.get("/api/sales", headers=headers_a).json["sales"]
        assert sales == []

        sales_b = client.get("/api/sales", headers=headers_b).json["sales"]
        assert [s["id"] for s in sales_b] == [sale_b.id]

    def test_denial_is_audited_with_user(self, client, tenant_a, headers_a, sale_b):
        owner_a = tenant_a[1]
        client.delete(f"/api/sales/{sale_b.id}", headers=headers_a)

        event = list_security_events(account_id=tenant_a[0].id)[0]
        assert event.event_type == EVENT_CROSS_TENANT_DENIED
        assert event.user_id == owner_a.id
        assert event.resource == f"/api/sales/{sale_b.id}"
        assert event.action == "DELETE"
