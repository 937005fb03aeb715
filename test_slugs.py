"""
Slug generation/validation and org-prefixed paths.
"""

from __future__ import annotations

from slugs import SLUG_MAX_LEN, generate_slug, is_valid_slug, onboarding_path, org_path, org_url


def test_generate_slug_examples() -> None:
    assert generate_slug("Working At Speed") == "working-at-speed"
    assert generate_slug("Company & Partners") == "company-partners"
    assert generate_slug("Tech!@#$%Corp") == "tech-corp"
    assert generate_slug("---Test Company---") == "test-company"


def test_generate_slug_caps_length() -> None:
    slug = generate_slug("a" * 80)
    assert len(slug) == SLUG_MAX_LEN
    assert generate_slug("") == ""
    assert generate_slug(None) == ""


def test_is_valid_slug() -> None:
    assert is_valid_slug("working-at-speed")
    assert is_valid_slug("ab")
    assert is_valid_slug("a-b")
    assert not is_valid_slug("a")
    assert not is_valid_slug("-abc")
    assert not is_valid_slug("abc-")
    assert not is_valid_slug("Has-Caps")
    assert not is_valid_slug("x" * 51)
    assert not is_valid_slug("")


def test_org_paths() -> None:
    assert org_url("acme") == "/acme"
    assert org_url("acme", "/drive") == "/acme/drive"
    assert org_url("acme", "drive") == "/acme/drive"
    assert org_path("acme", "/") == "/acme"
    assert org_path("acme", "/projects") == "/acme/projects"
    assert org_path(None, "/projects") == "/projects"
    assert onboarding_path("acme") == "/acme/onboarding"


if __name__ == "__main__":
    test_generate_slug_examples()
    test_generate_slug_caps_length()
    test_is_valid_slug()
    test_org_paths()
    print("PASS")
