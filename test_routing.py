"""
Org slug redirects and path-to-page resolution.
"""

from __future__ import annotations

from routing import is_protected_path, is_truthy, page_for_path, parse_search, query_value, resolve_org_redirect, split_org_path


def test_no_active_slug_never_redirects() -> None:
    assert resolve_org_redirect("/projects", route_slug=None, active_slug=None) is None
    assert resolve_org_redirect("/other/projects", route_slug="other", active_slug=None) is None


def test_mismatched_slug_is_replaced() -> None:
    target = resolve_org_redirect(
        "/other/projects",
        route_slug="other",
        active_slug="acme",
        search="?tab=1",
        hash="#top",
    )
    assert target == "/acme/projects?tab=1#top"
    assert resolve_org_redirect("/other", route_slug="other", active_slug="acme") == "/acme"


def test_matching_slug_stays() -> None:
    assert resolve_org_redirect("/acme/drive", route_slug="acme", active_slug="acme") is None


def test_protected_path_without_slug_is_prefixed() -> None:
    assert resolve_org_redirect("/", route_slug=None, active_slug="acme") == "/acme/"
    assert resolve_org_redirect("/drive", route_slug=None, active_slug="acme") == "/acme/drive"
    assert resolve_org_redirect("/settings/billing", route_slug=None, active_slug="acme", search="?x=1") == "/acme/settings/billing?x=1"


def test_unprotected_path_stays() -> None:
    assert resolve_org_redirect("/auth", route_slug=None, active_slug="acme") is None
    assert resolve_org_redirect("/feedback-form", route_slug=None, active_slug="acme") is None
    assert not is_protected_path("/drivex")
    assert is_protected_path("/drive/folder")


def test_split_and_page_lookup() -> None:
    assert split_org_path("/acme/drive?x=1") == ("acme", "/drive")
    assert split_org_path("/acme") == ("acme", "/")
    assert split_org_path("/auth") == (None, "/auth")
    assert split_org_path("/") == (None, "/")
    assert page_for_path("/acme") == "pages/3_Dashboard.py"
    assert page_for_path("/acme/calendar") == "pages/3_Dashboard.py"
    assert page_for_path("/acme/settings/billing") == "pages/7_Billing.py"
    assert page_for_path("/acme/dataroom/room-1") == "pages/5_Drive.py"
    assert page_for_path("/superadmin") == "pages/99_SuperAdmin.py"
    assert page_for_path("/acme/unknown") is None


def test_query_helpers() -> None:
    assert query_value({"a": ["1", "2"]}, "a") == "1"
    assert query_value({"a": 3}, "a") == "3"
    assert query_value({}, "a") is None
    assert is_truthy("Yes") and not is_truthy("0") and not is_truthy(None)
    assert parse_search("?tab=tasks&empty=") == {"tab": "tasks", "empty": ""}


if __name__ == "__main__":
    test_no_active_slug_never_redirects()
    test_mismatched_slug_is_replaced()
    test_matching_slug_stays()
    test_protected_path_without_slug_is_prefixed()
    test_unprotected_path_stays()
    test_split_and_page_lookup()
    test_query_helpers()
    print("PASS")
