from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from leaveservice.database import Base


class LeaveBalance(Base):
    """
    Allocated-vs-used day counter for one (user, policy, year).

    The unique constraint backs the conflict-safe inserts of the ledger;
    the check constraints keep 0 <= total_used <= total_allocated.
    """
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("user_id", "policy_id", "year", name="uq_leave_balances_user_policy_year"),
        CheckConstraint("total_used >= 0", name="ck_leave_balances_used_non_negative"),
        CheckConstraint("total_used <= total_allocated", name="ck_leave_balances_used_within_allocation"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    policy_id = Column(Integer, ForeignKey("leave_policies.id"), nullable=False)
    year = Column(Integer, nullable=False)
    total_allocated = Column(Integer, nullable=False, default=0)
    total_used = Column(Integer, nullable=False, default=0)

    policy = relationship("LeavePolicy", lazy="selectin")

    @property
    def balance_days(self) -> int:
        return (self.total_allocated or 0) - (self.total_used or 0)

    @property
    def policy_name(self):
        return self.policy.policy_name if self.policy is not None else None

    def __repr__(self):
        return f"<LeaveBalance {self.user_id} policy={self.policy_id} {self.year}: {self.total_used}/{self.total_allocated}>"
