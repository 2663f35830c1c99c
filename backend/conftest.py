"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from tenant.managers import set_current_tenant


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def reset_tenant_context():
    """
    Reset tenant context after each test.

    CRITICAL: This prevents tenant context from leaking between tests.
    If tenant context leaks, tests may pass when they should fail.
    """
    yield
    set_current_tenant(None)


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def manager_client(api_client, manager_user):
    """
    API client authenticated as a manager of tenant A.

    TenantMiddleware clears the thread-local tenant when each response is
    returned, so tests that query through the tenant-filtered managers after
    an API call must set the tenant again (or use ``all_objects``).
    """
    api_client.force_authenticate(user=manager_user)
    return api_client


@pytest.fixture
def cashier_client(cashier_user):
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=cashier_user)
    return client


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
