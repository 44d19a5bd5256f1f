"""
One-off provisioning of leave balances for existing users.

Usage:
    python -m scripts.init_balances USER_ID [USER_ID ...] [--year 2025]
"""
import argparse
import sys

from leaveservice.database import SessionLocal, init_db
from leaveservice.services.provisioning import ProvisioningService


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Provision leave balances for users across all policies")
    parser.add_argument("user_ids", nargs="+", help="User identifiers to provision")
    parser.add_argument("--year", type=int, default=None, help="Balance year (defaults to the current year)")
    args = parser.parse_args(argv)

    init_db()
    service = ProvisioningService(SessionLocal)
    total_created = 0
    for user_id in args.user_ids:
        result = service.ensure_balances_for_user(user_id, year=args.year)
        total_created += result.created
        print(f"{user_id}: attempted={result.attempted} created={result.created}")

    if total_created == 0:
        print("No new balances created (already provisioned, or no policies defined).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
