"""
Deterministic seed script for dev/demo environments.
"""

from __future__ import annotations

import os
import sys

from hrms.core.db import SessionLocal, Base, engine
from hrms.crud.roles import seed_roles_and_permissions
from hrms.seed.utils import get_or_create_company, get_or_create_employee, get_or_create_user
from hrms.tenancy.permissions import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_HR

DEMO_PASSWORD = "password123"


def ensure_not_production():
    env = os.getenv("ENV", "").lower()
    allow_prod = os.getenv("ALLOW_SEED_PROD", "0").lower() in {"1", "true", "yes"}
    if env == "production" and not allow_prod:
        print("Refusing to seed in production. Set ALLOW_SEED_PROD=1 to override.", file=sys.stderr)
        sys.exit(1)


def seed():
    ensure_not_production()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        roles = seed_roles_and_permissions(db)

        # Companies
        acme = get_or_create_company(db, "Acme Inc")
        umbrella = get_or_create_company(db, "Umbrella Corp")

        # Users
        alice = get_or_create_user(db, acme, roles[ROLE_ADMIN], "alice@acme.com", DEMO_PASSWORD)
        harry = get_or_create_user(db, acme, roles[ROLE_HR], "harry@acme.com", DEMO_PASSWORD)
        eve = get_or_create_user(db, acme, roles[ROLE_EMPLOYEE], "eve@acme.com", DEMO_PASSWORD)
        bob = get_or_create_user(db, umbrella, roles[ROLE_ADMIN], "bob@umbrella.com", DEMO_PASSWORD)

        # Employee profiles
        get_or_create_employee(db, acme, "ACME-001", "Alice", "Anders", user=alice, department="Management")
        get_or_create_employee(db, acme, "ACME-002", "Harry", "Hale", user=harry, department="People")
        get_or_create_employee(db, acme, "ACME-003", "Eve", "Evans", user=eve, department="Engineering")
        get_or_create_employee(db, acme, "ACME-004", "Mallory", "Moss", department="Engineering")
        get_or_create_employee(db, umbrella, "UMB-001", "Bob", "Baker", user=bob, department="Management")
    print("Seed complete.")


if __name__ == "__main__":
    seed()
