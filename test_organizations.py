"""
Active organization resolution, org switcher data and signup validation.
"""

from __future__ import annotations

from conftest import FakeClient
from organizations import (
    ACTIVE_ORG_KEY,
    create_organization,
    fetch_active_organization,
    list_user_organizations,
    set_active_organization,
    validate_org_details,
)


def _client() -> FakeClient:
    return FakeClient(
        {
            "profiles": [{"id": "u1", "organization_id": "org-a", "full_name": "Ada Lovelace"}],
            "organizations": [
                {"id": "org-a", "name": "Acme", "slug": "acme"},
                {"id": "org-b", "name": "Beta Labs", "slug": "beta-labs", "is_suspended": True},
            ],
            "user_roles": [
                {"user_id": "u1", "organization_id": "org-a", "role": "admin"},
                {"user_id": "u1", "organization_id": "org-b", "role": "user"},
            ],
        }
    )


def test_active_org_defaults_to_profile_org() -> None:
    store: dict = {}
    org, profile = fetch_active_organization("u1", store=store, client=_client())
    assert org is not None and org.slug == "acme"
    assert profile is not None and profile.full_name == "Ada Lovelace"
    assert store[ACTIVE_ORG_KEY] == "org-a"


def test_stored_org_is_used_when_user_is_member() -> None:
    store = {ACTIVE_ORG_KEY: "org-b"}
    org, _ = fetch_active_organization("u1", store=store, client=_client())
    assert org is not None and org.id == "org-b"
    assert org.is_suspended is True


def test_stored_org_without_membership_falls_back() -> None:
    store = {ACTIVE_ORG_KEY: "org-zzz"}
    org, _ = fetch_active_organization("u1", store=store, client=_client())
    assert org is not None and org.id == "org-a"
    assert store[ACTIVE_ORG_KEY] == "org-a"


def test_missing_profile_or_user() -> None:
    assert fetch_active_organization(None, store={}) == (None, None)
    assert fetch_active_organization("ghost", store={}, client=_client()) == (None, None)


def test_fetch_errors_return_none() -> None:
    client = _client()
    client.failing_tables.add("organizations")
    org, profile = fetch_active_organization("u1", store={}, client=client)
    assert org is None
    assert profile is not None


def test_list_user_organizations_uses_joined_rows() -> None:
    client = _client()
    for row in client.tables["user_roles"]:
        org = next(o for o in client.tables["organizations"] if o["id"] == row["organization_id"])
        row["organizations"] = dict(org)
    store = {ACTIVE_ORG_KEY: "org-b"}
    orgs = list_user_organizations("u1", store=store, client=client)
    assert [(o.slug, o.ui_role) for o in orgs] == [("acme", "admin"), ("beta-labs", "viewer")]
    assert store[ACTIVE_ORG_KEY] == "org-b"

    store = {ACTIVE_ORG_KEY: "elsewhere"}
    list_user_organizations("u1", store=store, client=client)
    assert store[ACTIVE_ORG_KEY] == "org-a"


def test_set_active_organization() -> None:
    store: dict = {}
    set_active_organization("org-b", store=store)
    assert store[ACTIVE_ORG_KEY] == "org-b"


def test_create_organization_calls_rpc() -> None:
    client = FakeClient()
    client.rpc_results["create_organization_and_profile"] = "org-new"
    org_id, error = create_organization("u1", " Acme ", "1-10", "Ada", "CEO", "0123456789", client=client)
    assert (org_id, error) == ("org-new", None)
    name, params = client.rpc_calls[0]
    assert name == "create_organization_and_profile"
    assert params["_org_name"] == "Acme"

    client.rpc_results["create_organization_and_profile"] = RuntimeError("duplicate key")
    org_id, error = create_organization("u1", "Acme", "1-10", "Ada", "CEO", "0123456789", client=client)
    assert org_id is None and error == "duplicate key"


def test_validate_org_details() -> None:
    assert validate_org_details("Acme", "11-50", "Ada Lovelace", "CEO", "0123456789") == {}
    errors = validate_org_details("A", "", "", "C" * 101, "123")
    assert errors["org_name"] == "Organization name must be at least 2 characters"
    assert errors["employee_size"] == "Please select employee size"
    assert errors["full_name"] == "Full name must be at least 2 characters"
    assert errors["job_role"] == "Job role must be at most 100 characters"
    assert errors["phone_number"] == "Phone number must be at least 7 digits"


if __name__ == "__main__":
    test_active_org_defaults_to_profile_org()
    test_stored_org_is_used_when_user_is_member()
    test_stored_org_without_membership_falls_back()
    test_missing_profile_or_user()
    test_fetch_errors_return_none()
    test_list_user_organizations_uses_joined_rows()
    test_set_active_organization()
    test_create_organization_calls_rpc()
    test_validate_org_details()
    print("PASS")
