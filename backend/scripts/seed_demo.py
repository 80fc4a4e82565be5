#!/usr/bin/env python
"""Idempotent seed script for demo users (one per role) and budget funds.

Usage:
    python backend/scripts/seed_demo.py               # seed normally
    python backend/scripts/seed_demo.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --year 2026 --show
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from datetime import date
from sqlalchemy import select, inspect

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, get_db  # type: ignore
from app.constants.roles import ALL_ROLES, ROLE_LABELS
from app.models.authz import Base, User
from app.models.fund import BudgetFund
from seeds.demo_data import USERS, FUNDS, DEMO_PASSWORD_ENV, DEFAULT_DEMO_PASSWORD


def ensure_users(session, password: str) -> int:
    existing = {u.email for u in session.execute(select(User)).scalars().all()}
    created = 0
    for email, (name, role, department) in USERS.items():
        if role not in ALL_ROLES:
            print(f"[WARN] Unknown role '{role}' for {email}; skipped")
            continue
        if email in existing:
            continue
        u = User(name=name, email=email, password_hash='', role=role, department=department)
        u.set_password(password)
        session.add(u)
        created += 1
    return created


def ensure_funds(session, year: int) -> int:
    existing = {f.name for f in session.execute(select(BudgetFund)).scalars().all()}
    created = 0
    for name, description in FUNDS.items():
        if name not in existing:
            session.add(BudgetFund(name=name, year=year, description=description))
            created += 1
    return created


def print_summary(session):
    users = session.execute(select(User).order_by(User.id)).scalars().all()
    if not users:
        print("[INFO] No users present.")
        return
    email_w = max(len(u.email) for u in users)
    print(f"{'Email'.ljust(email_w)} | Role")
    print('-' * (email_w + 30))
    for u in users:
        print(f"{u.email.ljust(email_w)} | {u.role} ({ROLE_LABELS.get(u.role, '?')})")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed demo users & budget funds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  show users: seed_demo.py --show\n""")
    )
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--show', action='store_true', help='Print seeded users after seeding')
    p.add_argument('--year', type=int, default=date.today().year, help='Fiscal year for new funds')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        engine = session.get_bind()
        if not inspect(engine).has_table('users'):
            # Bootstrap schema when migrations have not been run; prefer `alembic upgrade head`
            Base.metadata.create_all(engine)
        try:
            created_u = ensure_users(session, os.getenv(DEMO_PASSWORD_ENV, DEFAULT_DEMO_PASSWORD))
            created_f = ensure_funds(session, args.year)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Users would create: {created_u}, Funds would create: {created_f}")
            else:
                session.commit()
                print(f"[DONE] Users created: {created_u}, Funds created: {created_f}")
            if args.show:
                print_summary(session)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
