# scripts/seed_church.py
r"""
Seed a church (tenant) with its default giving categories and an admin user:
- Creates the church row (tax id encrypted when ENCRYPTION_KEY is set).
- Creates the default giving categories (Current, Mission, ...).
- Creates an admin user if missing and links it to the church.
- Stores only the API key hash; prints plaintext once.

Usage:
  (.venv) $ python scripts/seed_church.py --name "Trinity Lutheran" --ein 12-3456789 --email admin@steward.local

Then test:
  curl -s -H "X-API-Key: <PRINTED_API_KEY>" -H "X-Church-Id: <PRINTED_CHURCH_ID>" \
       "http://127.0.0.1:8000/giving-statements?year=2024"
"""
from __future__ import annotations

import argparse
import secrets
import sys
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import SessionLocal
from app.dependencies import _hash_api_key
from app.models.church import Church
from app.models.giving import GivingCategory
from app.models.rbac import ChurchUser, User
from app.services.encryption import encrypt

DEFAULT_CATEGORIES = (
    ("Current", 1),
    ("Mission", 2),
    ("Memorials", 3),
    ("Debt", 4),
    ("School", 5),
    ("Miscellaneous", 6),
)


def seed_church(
    db: Session,
    *,
    name: str,
    admin_email: str,
    ein: Optional[str] = None,
    admin_name: str = "Admin",
    plan: str = "basic",
) -> Tuple[Church, User, Optional[str]]:
    """
    Returns (church, user, api_key). api_key is None when the user already
    existed (its key is never recoverable).
    """
    church = Church(name=name, tax_id=encrypt(ein) if ein else None, subscription_plan=plan)
    db.add(church)
    db.flush()

    for cat_name, order in DEFAULT_CATEGORIES:
        db.add(GivingCategory(church_id=church.id, name=cat_name, display_order=order))

    email = admin_email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    api_key = None
    if user is None:
        api_key = secrets.token_urlsafe(32)
        user = User(email=email, display_name=admin_name, api_key_hash=_hash_api_key(api_key))
        db.add(user)
        db.flush()

    db.add(ChurchUser(user_id=user.id, church_id=church.id, role="admin"))
    db.commit()
    return church, user, api_key


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a church with default categories and an admin user")
    parser.add_argument("--name", required=True, help="Church name")
    parser.add_argument("--email", required=True, help="Admin user email")
    parser.add_argument("--ein", default=None, help="Employer Identification Number")
    parser.add_argument("--admin-name", default="Admin", help="Admin display name")
    parser.add_argument("--plan", default="basic", choices=["basic", "premium"])
    args = parser.parse_args()

    with SessionLocal() as db:
        church, user, api_key = seed_church(
            db,
            name=args.name,
            admin_email=args.email,
            ein=args.ein,
            admin_name=args.admin_name,
            plan=args.plan,
        )
        print(f"✅ Church: {church.name} ({church.id})")
        print(f"✅ Admin user: {user.email} ({user.id})")
        if api_key:
            print("\n=== SAVE THIS API KEY (shown once) ===")
            print(api_key)
            print("=====================================\n")
        else:
            print("ℹ️  User already existed; API key unchanged.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
