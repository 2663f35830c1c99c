"""
API tests for /api/cash-drawer/sessions/

Run with: pytest backend/cash_drawer/tests/test_api.py -v
"""
import pytest

from cash_drawer.models import CashSession

SESSIONS_URL = "/api/cash-drawer/sessions/"


@pytest.mark.django_db
class TestSessionLifecycleAPI:

    def test_open_then_reopen(self, cashier_client, cashier_user):
        first = cashier_client.post(f"{SESSIONS_URL}open/", {"initial_balance": "100.00"}, format="json")
        second = cashier_client.post(f"{SESSIONS_URL}open/", {"initial_balance": "20.00"}, format="json")

        assert first.status_code == 201
        assert first.data["status"] == "open"
        assert first.data["initial_balance"] == "100.00"
        assert second.status_code == 200
        assert second.data["id"] == first.data["id"]
        assert CashSession.all_objects.filter(operator=cashier_user).count() == 1

    def test_open_negative_float(self, cashier_client):
        response = cashier_client.post(f"{SESSIONS_URL}open/", {"initial_balance": "-5"}, format="json")
        assert response.status_code == 400

    def test_current(self, cashier_client, cashier_session):
        response = cashier_client.get(f"{SESSIONS_URL}current/")

        assert response.status_code == 200
        assert response.data["id"] == cashier_session.pk

    def test_current_without_session(self, cashier_client):
        response = cashier_client.get(f"{SESSIONS_URL}current/")

        assert response.status_code == 404
        assert response.data["code"] == "NO_OPEN_SESSION"

    def test_summary(self, rate_settings, cashier_client, cashier_session, sell):
        sell(cashier_session, "50.00", "CASH")
        sell(cashier_session, "30.00", "CREDIT")

        response = cashier_client.get(f"{SESSIONS_URL}{cashier_session.pk}/summary/")

        assert response.status_code == 200
        assert response.data["cash"] == "50.00"
        assert response.data["credit"] == "30.00"
        assert response.data["grand_total"] == "80.00"
        assert response.data["fee_total"] == "1.20"
        assert response.data["expected_cash"] == "150.00"

    def test_close(self, cashier_client, cashier_session, sell):
        sell(cashier_session, "50.00", "CASH")

        response = cashier_client.post(
            f"{SESSIONS_URL}{cashier_session.pk}/close/", {"counted_cash": "140.00", "notes": "Short"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "closed"
        assert response.data["calculated_balance"] == "150.00"
        assert response.data["discrepancy"] == "-10.00"
        assert response.data["needs_verification"] is True

    def test_close_closed_session(self, cashier_client, cashier_session):
        url = f"{SESSIONS_URL}{cashier_session.pk}/close/"
        cashier_client.post(url, {"counted_cash": "100.00"}, format="json")

        response = cashier_client.post(url, {"counted_cash": "100.00"}, format="json")

        assert response.status_code == 400
        assert response.data["code"] == "SESSION_NOT_OPEN"


@pytest.mark.django_db
class TestSessionPermissionsAPI:

    def test_cashier_sees_only_own_sessions(self, tenant_a, other_cashier, cashier_client, cashier_session):
        from cash_drawer.services import CashSessionService
        other, _ = CashSessionService.open_session(tenant_a, other_cashier)

        response = cashier_client.get(SESSIONS_URL)

        assert [row["id"] for row in response.data["results"]] == [cashier_session.pk]
        assert cashier_client.get(f"{SESSIONS_URL}{other.pk}/").status_code == 404

    def test_manager_sees_all_sessions(self, tenant_a, other_cashier, manager_client, cashier_session):
        from cash_drawer.services import CashSessionService
        CashSessionService.open_session(tenant_a, other_cashier)

        response = manager_client.get(SESSIONS_URL)

        assert response.data["count"] == 2

    def test_cashier_cannot_verify(self, cashier_client, cashier_session):
        cashier_client.post(f"{SESSIONS_URL}{cashier_session.pk}/close/", {"counted_cash": "90.00"}, format="json")

        response = cashier_client.post(f"{SESSIONS_URL}{cashier_session.pk}/verify/")

        assert response.status_code == 403
        assert response.data["code"] == "APPROVER_REQUIRED"

    def test_manager_verifies(self, manager_client, manager_user, cashier_session):
        from cash_drawer.services import CashSessionService
        CashSessionService.close_session(cashier_session, "90.00")

        response = manager_client.post(f"{SESSIONS_URL}{cashier_session.pk}/verify/")

        assert response.status_code == 200
        assert response.data["verified_by"] == manager_user.pk
        assert response.data["needs_verification"] is False

    def test_force_close(self, manager_client, cashier_session):
        response = manager_client.post(
            f"{SESSIONS_URL}{cashier_session.pk}/force-close/", {"notes": "Operator left"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["status"] == "closed"
        assert response.data["final_balance"] == "100.00"
        assert response.data["notes"] == "Operator left"

    def test_other_tenant_cannot_see_session(self, api_client, user_tenant_b, cashier_session):
        api_client.force_authenticate(user=user_tenant_b)

        assert api_client.get(f"{SESSIONS_URL}{cashier_session.pk}/").status_code == 404

    def test_anonymous_rejected(self, api_client):
        assert api_client.get(SESSIONS_URL).status_code in (401, 403)
