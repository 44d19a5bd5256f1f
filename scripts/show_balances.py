import sys

from leaveservice.database import SessionLocal
from leaveservice.services import balance_ledger


def show_balances(user_id: str):
    db = SessionLocal()
    try:
        balances = balance_ledger.list_balances(db, user_id)
        if not balances:
            print(f"No balances found for {user_id}")
            return
        print(f"Balances for {user_id}:")
        for b in balances:
            print(f" - {b.year} {b.policy_name}: used {b.total_used}/{b.total_allocated}, available {b.balance_days}")
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m scripts.show_balances USER_ID")
        sys.exit(1)
    show_balances(sys.argv[1])
