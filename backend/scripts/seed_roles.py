#!/usr/bin/env python
"""Idempotent seed script for the default roles and the first administrator.

Usage:
    python backend/scripts/seed_roles.py                # seed normally
    python backend/scripts/seed_roles.py --dry-run      # report what would be created, write nothing
    python backend/scripts/seed_roles.py --show-roles   # print role summary after seeding
    python backend/scripts/seed_roles.py --export-json  # dump role -> readable modules JSON
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from admin_console import create_app, get_db  # type: ignore
from admin_console.seeds import (
    admin_user_missing, ensure_roles, ensure_initial_admin, missing_presets, summarize_roles, role_grant_map,
)


def print_role_summary(session):
    rows = summarize_roles(session)
    if not rows:
        print("[INFO] No roles present.")
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Modules | Enabled")
    print('-' * (name_w + 22))
    for name, cnt, enabled in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(7)} | {'yes' if enabled else 'no'}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed default roles & initial admin",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_roles.py\n  dry run: seed_roles.py --dry-run\n  show roles: seed_roles.py --show-roles\n""")
    )
    p.add_argument('--dry-run', action='store_true', help='Report missing roles and admin user without writing')
    p.add_argument('--show-roles', action='store_true', help='Print role summary after seeding')
    p.add_argument('--export-json', nargs='?', const='-', metavar='FILE', help='Export role->modules JSON (to FILE or stdout if omitted)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            if args.dry_run:
                missing = missing_presets(session)
                print(f"[DRY-RUN] Roles to create: {', '.join(missing) or 'none'}")
                print(f"[DRY-RUN] Admin user to create: {'yes' if admin_user_missing(session) else 'no'}")
            else:
                created = ensure_roles(session)
                ensure_initial_admin(session)
                print(f"[DONE] Roles created: {created}")
            if args.show_roles:
                print('\nRole Summary:')
                print_role_summary(session)
            if args.export_json is not None:
                payload = role_grant_map(session)
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
