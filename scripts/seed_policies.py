from leaveservice.database import SessionLocal, init_db
from leaveservice.models.leave_policy import LeaveType
from leaveservice.services import policy_store

DEFAULT_POLICIES = [
    ("Annual Leave", LeaveType.ANNUAL, 21, True, "Paid annual vacation"),
    ("Sick Leave", LeaveType.SICK, 10, False, "Paid sick leave"),
    ("Casual Leave", LeaveType.CASUAL, 7, False, "Short personal absences"),
    ("Unpaid Leave", LeaveType.UNPAID, 0, False, "Unpaid time off, allocated case by case"),
]


def seed():
    init_db()
    db = SessionLocal()
    try:
        for name, leave_type, max_days, carry_forward, description in DEFAULT_POLICIES:
            if policy_store.find_policy_by_name(db, name):
                print(f"Policy '{name}' already exists")
                continue
            policy_store.create_policy(
                db,
                policy_name=name,
                leave_type=leave_type.value,
                max_days_per_year=max_days,
                carry_forward=carry_forward,
                description=description,
            )
            print(f"Created policy '{name}' ({max_days} days/year)")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
