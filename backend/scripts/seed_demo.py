#!/usr/bin/env python
"""Idempotent seed script for the demo report records.

Usage:
    python backend/scripts/seed_demo.py                # seed normally
    python backend/scripts/seed_demo.py --dry-run      # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --show-roles   # print role -> permission summary
    python backend/scripts/seed_demo.py --export-json roles.json
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json, hashlib
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from dealergate import create_app, get_db  # type: ignore
from dealergate.constants.roles import REPORTING_ROLES
from dealergate.models.records import Base, SalesRecord, ServiceTicket, Customer, Payment

SALES_ROWS = [
    {'user_id': 'rep-001', 'manager_id': 'mgr-001', 'territory': 'north', 'customer_name': 'Acme Copiers', 'amount_cents': 125000,
     'team_comparison': {'rank': 2, 'of': 3}, 'manager_notes': 'Push the service contract renewal'},
    {'user_id': 'rep-002', 'manager_id': 'mgr-001', 'territory': 'east', 'customer_name': 'Beta Print', 'amount_cents': 98000,
     'team_comparison': {'rank': 3, 'of': 3}, 'manager_notes': None},
    {'user_id': 'rep-009', 'manager_id': 'mgr-002', 'territory': 'south', 'customer_name': 'Gamma Office', 'amount_cents': 210000,
     'team_comparison': {'rank': 1, 'of': 4}, 'manager_notes': 'Large fleet opportunity'},
]
SERVICE_ROWS = [
    {'technician_id': 'tech-001', 'assigned_manager_id': 'svc-mgr-001', 'territory': 'north', 'customer_name': 'Acme Copiers', 'summary': 'Fuser replacement'},
    {'technician_id': 'tech-002', 'assigned_manager_id': 'svc-mgr-001', 'territory': 'east', 'customer_name': 'Beta Print', 'summary': 'Paper jam tray 2'},
]
CUSTOMER_ROWS = [
    {'name': 'Acme Copiers', 'owner_id': 'rep-001', 'territory': 'north', 'profit_margin': 31, 'credit_score': 712, 'internal_notes': 'Slow payer in Q4'},
    {'name': 'Beta Print', 'owner_id': 'rep-002', 'territory': 'east', 'profit_margin': 18, 'credit_score': 655, 'internal_notes': None},
]
PAYMENT_ROWS = [
    {'customer_name': 'Acme Copiers', 'territory': 'north', 'amount_cents': 45000,
     'detailed_financials': {'invoice': 'INV-1001', 'terms': 'NET30'}, 'credit_limit_cents': 500000},
]


def ensure_rows(session, model, rows, key_fields):
    created = 0
    for row in rows:
        lookup = select(model).filter_by(**{k: row[k] for k in key_fields})
        if session.execute(lookup).scalars().first() is None:
            session.add(model(**row))
            created += 1
    return created


def build_role_permission_map():
    return {
        role_id: sorted(f"{p.resource}:{'|'.join(p.actions)}" for p in role.permissions)
        for role_id, role in REPORTING_ROLES.items()
    }


def print_role_summary():
    mapping = build_role_permission_map()
    name_w = max(len(r) for r in mapping)
    print(f"{'Role'.ljust(name_w)} | Level     | Permissions")
    print('-' * (name_w + 40))
    for role_id, perms in mapping.items():
        level = REPORTING_ROLES[role_id].level
        print(f"{role_id.ljust(name_w)} | {level.ljust(9)} | {', '.join(perms)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed demo report records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  show roles: seed_demo.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print the reporting role matrix')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->permissions JSON (to FILE or stdout if omitted)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM sales_records LIMIT 1'))
        except Exception:
            # bootstrap only; real environments run `alembic upgrade head`
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        try:
            created = {
                'sales_records': ensure_rows(session, SalesRecord, SALES_ROWS, ('user_id', 'customer_name')),
                'service_tickets': ensure_rows(session, ServiceTicket, SERVICE_ROWS, ('technician_id', 'customer_name')),
                'customers': ensure_rows(session, Customer, CUSTOMER_ROWS, ('name',)),
                'payments': ensure_rows(session, Payment, PAYMENT_ROWS, ('customer_name', 'amount_cents')),
            }
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) would create: {created}")
            else:
                session.commit()
                print(f"[DONE] created: {created}")
            if args.show_roles:
                print('\nReporting Role Summary:')
                print_role_summary()
            if args.export_json is not None:
                mapping = build_role_permission_map()
                canonical = json.dumps(mapping, sort_keys=True, separators=(',', ':'))
                payload = {
                    'roles': mapping,
                    'meta': {'roles_checksum_sha256': hashlib.sha256(canonical.encode('utf-8')).hexdigest()},
                }
                if args.export_json == '-':
                    print(json.dumps(payload, indent=2, sort_keys=True))
                else:
                    with open(args.export_json, 'w', encoding='utf-8') as f:
                        json.dump(payload, f, indent=2, sort_keys=True)
                    print(f"[INFO] Exported JSON to {args.export_json}")
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
