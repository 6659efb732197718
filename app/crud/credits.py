import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.database import utcnow
from app.models import Credit
from app.utils.credits import (
    Allocation,
    CreditGroup,
    allocate_payment,
    group_credits,
    is_outstanding,
    newest_credit,
    payment_memo,
)

logger = logging.getLogger(__name__)


def get_credits(db: Session, limit: int = None) -> List[Credit]:
    """Newest first, capped at the configured fetch limit."""
    return (
        db.query(Credit)
        .order_by(Credit.created_at.desc(), Credit.id.desc())
        .limit(limit or settings.CREDITS_FETCH_LIMIT)
        .all()
    )


def outstanding_groups(db: Session) -> List[CreditGroup]:
    return group_credits([c for c in get_credits(db) if is_outstanding(c)])


def find_group(groups: List[CreditGroup], key: str) -> Optional[CreditGroup]:
    for g in groups:
        if g.key == key:
            return g
    return None


def create_credit(
    db: Session,
    amount: Decimal,
    customer=None,
    customer_name: str = None,
    customer_phone: str = None,
    note: str = None,
) -> Credit:
    """A linked customer wins over the typed name and phone."""
    credit = Credit(
        customer_id=customer.id if customer else None,
        customer_name=((customer.name if customer else customer_name) or "").strip() or None,
        customer_phone=((customer.phone if customer else customer_phone) or "").strip() or None,
        amount=amount,
        amount_paid=Decimal("0"),
        note=(note or "").strip() or None,
        status="open",
    )
    db.add(credit)
    db.commit()
    db.refresh(credit)
    logger.info("Credit %s opened for %s: %s", credit.id, credit.customer_name or credit.customer_phone, amount)
    return credit


def apply_payment(db: Session, group: CreditGroup, amount: Decimal, note: str = None) -> Tuple[Decimal, List[Allocation]]:
    """
    Persists a group payment. Each touched credit gets its new amount_paid;
    settled ones are marked paid, the rest stay open.
    """
    allocations = allocate_payment(group, amount)
    now = utcnow()

    for a in allocations:
        a.credit.amount_paid = a.next_paid
        if a.settles:
            a.credit.status = "paid"
            a.credit.paid_at = now
        else:
            a.credit.status = "open"
            a.credit.paid_at = None

    applied = sum((a.amount for a in allocations), Decimal(0))

    memo = (note or "").strip()
    if memo and applied > 0:
        target = newest_credit(group)
        if target is not None:
            target.note = payment_memo(target.note, applied, memo)

    db.commit()
    logger.info("Payment of %s applied to group %s across %d credits", applied, group.key, len(allocations))
    return applied, allocations
