# (c) Copyright Datacraft, 2026
"""Tests for the tenant request middleware."""
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from tenantry.core.exceptions import UnknownTenantError
from tenantry.core.tenancy import TenantRegistry, get_current_tenant
from tenantry.core.tenancy.middleware import TenantMiddleware


@pytest.fixture
def client():
	app = FastAPI()
	app.add_middleware(
		TenantMiddleware,
		registry=TenantRegistry(["company_x", "company_y"]),
	)

	@app.get("/whoami")
	async def whoami():
		return {"tenant": get_current_tenant()}

	@app.get("/monitoring/health")
	async def health():
		return {"tenant": get_current_tenant()}

	return TestClient(app)


def test_known_tenant_is_bound_for_the_request(client):
	response = client.get("/whoami", headers={"X-Tenant-Id": "company_x"})

	assert response.status_code == 200
	assert response.json() == {"tenant": "company_x"}


def test_consecutive_requests_do_not_share_tenant(client):
	first = client.get("/whoami", headers={"X-Tenant-Id": "company_x"})
	second = client.get("/whoami", headers={"X-Tenant-Id": "company_y"})

	assert first.json() == {"tenant": "company_x"}
	assert second.json() == {"tenant": "company_y"}
	assert client.get("/monitoring/health").json() == {"tenant": None}


def test_unknown_tenant_is_rejected(client):
	tenant_id = "unknown"

	response = client.get("/whoami", headers={"X-Tenant-Id": tenant_id})

	assert response.status_code == 400
	assert response.headers["content-type"] == "application/problem+json"
	body = response.json()
	assert body["title"] == "Unknown database tenant"
	assert body["detail"] == "Value of header X-Tenant-Id does not match a known database tenant"
	assert body["tenantId"] == tenant_id


def test_tenant_lookup_is_case_sensitive(client):
	response = client.get("/whoami", headers={"X-Tenant-Id": "COMPANY_X"})

	assert response.status_code == 400
	assert response.json()["tenantId"] == "COMPANY_X"


def test_missing_header_is_rejected(client):
	response = client.get("/whoami")

	assert response.status_code == 400
	assert response.json()["title"] == "Missing database tenant"


def test_excluded_paths_skip_tenant_resolution(client):
	response = client.get("/monitoring/health")

	assert response.status_code == 200
	assert response.json() == {"tenant": None}


def test_unknown_tenant_comes_from_registry_lookup(client):
	with patch.object(
		TenantRegistry, "require", autospec=True, side_effect=UnknownTenantError("company_x")
	) as require:
		response = client.get("/whoami", headers={"X-Tenant-Id": "company_x"})

	assert response.status_code == 400
	assert response.json()["tenantId"] == "company_x"
	require.assert_called_once()
	assert require.call_args.args[1] == "company_x"
