# tests/test_access_and_encryption.py

import pytest
from sqlalchemy import select

from app.models.church import Church
from app.models.giving import GivingCategory
from app.models.rbac import ChurchUser
from app.services.encryption import PREFIX, EncryptionError, decrypt, decrypt_church, encrypt
from app.services.permissions import has_permission, permissions_for_role
from scripts.seed_church import DEFAULT_CATEGORIES, seed_church


# --- permissions -------------------------------------------------------------

@pytest.mark.parametrize(
    "granted, required, expected",
    [
        ({"*"}, "giving_statements:manage", True),
        ({"giving_statements:*"}, "giving_statements:manage", True),
        ({"giving_statements:*"}, "giving_statements", True),
        ({"giving:*"}, "giving_statements:manage", False),
        ({"giving_statements:manage"}, "giving_statements:manage", True),
        (set(), "giving_statements:manage", False),
    ],
)
def test_has_permission(granted, required, expected):
    assert has_permission(granted, required) is expected


def test_premium_only_roles_have_nothing_on_basic_plan():
    assert permissions_for_role("giving_editor", "basic") == frozenset()
    assert "giving_statements:*" in permissions_for_role("giving_editor", "premium")
    assert permissions_for_role("admin", "basic") == frozenset({"*"})
    assert permissions_for_role("unknown", "premium") == frozenset()
    assert permissions_for_role(None, None) == frozenset()


# --- encryption --------------------------------------------------------------

def test_encrypt_round_trip_and_prefix():
    token = encrypt("12-3456789")
    assert token.startswith(PREFIX)
    assert "12-3456789" not in token
    assert decrypt(token) == "12-3456789"


def test_plaintext_passes_through():
    assert decrypt("12-3456789") == "12-3456789"
    assert decrypt(None) is None
    assert encrypt("") == ""


def test_encrypt_without_key_stores_plaintext(monkeypatch):
    monkeypatch.delenv("ENCRYPTION_KEY")
    assert encrypt("12-3456789") == "12-3456789"


def test_decrypt_with_wrong_key_raises(monkeypatch):
    token = encrypt("12-3456789")
    monkeypatch.setenv("ENCRYPTION_KEY", "other")
    with pytest.raises(EncryptionError):
        decrypt(token)


def test_decrypt_church_blanks_undecryptable_tax_id(monkeypatch):
    church = Church(id="c1", name="Grace", tax_id=encrypt("12-3456789"), is_501c3=True)
    assert decrypt_church(church).tax_id == "12-3456789"

    monkeypatch.setenv("ENCRYPTION_KEY", "other")
    assert decrypt_church(church).tax_id == ""


# --- seeding -----------------------------------------------------------------

def test_seed_church_creates_tenant_categories_and_admin(client, db):
    church, user, api_key = seed_church(
        db, name="Grace Church", admin_email="Pastor@Grace.example", ein="98-7654321"
    )
    assert api_key
    assert user.email == "pastor@grace.example"
    assert church.tax_id.startswith(PREFIX)

    names = db.execute(
        select(GivingCategory.name).where(GivingCategory.church_id == church.id).order_by(GivingCategory.display_order)
    ).scalars().all()
    assert names == [name for name, _ in DEFAULT_CATEGORIES]

    link = db.get(ChurchUser, (user.id, church.id))
    assert link.role == "admin"

    # the printed key works against the API
    r = client.get("/giving-statements", headers={"X-API-Key": api_key, "X-Church-Id": church.id})
    assert r.status_code == 200
    assert r.json() == []


def test_seed_second_church_reuses_existing_user(db):
    _, first_user, _ = seed_church(db, name="A", admin_email="admin@example.org")
    _, user, api_key = seed_church(db, name="B", admin_email="admin@example.org")
    assert user.id == first_user.id
    assert api_key is None
