# tests/conftest.py
# Shared fixtures: in-memory SQLite schema, TestClient with get_db overridden,
# and a small seeder for churches / households / members / giving.

import os
from datetime import date
from decimal import Decimal

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db import Base, get_db
from app.dependencies import _hash_api_key
from app.main import app
from app.models.church import Church
from app.models.giving import GivingCategory, GivingItem, GivingRecord
from app.models.household import Household, Member
from app.models.rbac import ChurchUser, User
from app.services.encryption import encrypt

TEST_ENCRYPTION_KEY = "test-encryption-secret"
ADMIN_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    monkeypatch.setenv("AUTH_ENFORCE", "true")
    monkeypatch.setenv("API_KEY_PEPPER", "")
    monkeypatch.setenv("ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
    monkeypatch.delenv("STATEMENT_VALIDATION_POLICY", raising=False)
    monkeypatch.delenv("SMTP_HOST", raising=False)


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def _get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Seeder:
    """Tiny object factory bound to one session and church."""

    def __init__(self, db, church):
        self.db = db
        self.church = church
        self._categories = {}

    def category(self, name, display_order=0, is_active=True):
        if name not in self._categories:
            cat = GivingCategory(
                church_id=self.church.id, name=name, display_order=display_order, is_active=is_active
            )
            self.db.add(cat)
            self.db.commit()
            self._categories[name] = cat
        return self._categories[name]

    def household(self, name=None, **addr):
        h = Household(church_id=self.church.id, name=name, **addr)
        self.db.add(h)
        self.db.commit()
        return h

    def member(self, household, first, last, head=False, email=None, envelope=None, code=None):
        m = Member(
            church_id=self.church.id,
            household_id=household.id,
            first_name=first,
            last_name=last,
            is_head_of_household=head,
            email=email,
            envelope_number=envelope,
            membership_code=code,
        )
        self.db.add(m)
        self.db.commit()
        return m

    def give(self, member, day, *items, notes=None):
        """items: (category or None, amount) pairs."""
        rec = GivingRecord(
            church_id=self.church.id,
            member_id=member.id,
            date_given=day,
            notes=notes,
            items=[
                GivingItem(category_id=cat.id if cat is not None else None, amount=Decimal(str(amt)))
                for cat, amt in items
            ],
        )
        self.db.add(rec)
        self.db.commit()
        return rec

    def user(self, email, api_key, role="admin"):
        u = User(email=email, display_name=email.split("@")[0], api_key_hash=_hash_api_key(api_key))
        self.db.add(u)
        self.db.flush()
        self.db.add(ChurchUser(user_id=u.id, church_id=self.church.id, role=role))
        self.db.commit()
        return u


@pytest.fixture()
def church(db):
    c = Church(
        name="Trinity Lutheran Church",
        address="100 Main St",
        city="Springfield",
        state="IL",
        zip="62701",
        phone="555-0100",
        email="office@trinity.example",
        tax_id=encrypt("12-3456789"),
        is_501c3=True,
        goods_services_provided=False,
    )
    db.add(c)
    db.commit()
    return c


@pytest.fixture()
def seed(db, church):
    return Seeder(db, church)


@pytest.fixture()
def admin(seed):
    return seed.user("admin@trinity.example", ADMIN_KEY, role="admin")


@pytest.fixture()
def headers(admin, church):
    return {"X-API-Key": ADMIN_KEY, "X-Church-Id": church.id}


@pytest.fixture()
def giving_2024(seed):
    """Two households giving in 2024 with one 2023 record on the side."""
    current = seed.category("Current", 1)
    mission = seed.category("Mission", 2)

    smith = seed.household("Smith Household", address1="1 Elm St", city="Springfield", state="IL", zip="62701")
    john = seed.member(smith, "John", "Smith", head=True, email="john@smith.example", envelope=101)
    seed.give(john, date(2024, 3, 3), (current, "12.50"), (mission, "7.50"))
    seed.give(john, date(2024, 3, 10), (current, "0.01"))

    jones = seed.household("Jones Household")
    mary = seed.member(jones, "Mary", "Jones", head=True, email="mary@jones.example", envelope=102)
    seed.give(mary, date(2024, 6, 2), (current, "50.00"))
    seed.give(mary, date(2023, 12, 31), (current, "999.00"))

    return {"smith": smith, "jones": jones, "john": john, "mary": mary, "current": current, "mission": mission}
