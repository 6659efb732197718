"""
Credit grouping and partial-payment allocation.

Credits are grouped per customer (id, else phone, else typed name, else the
row itself). Payments settle a group's credits oldest-created-first.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

EPSILON = Decimal("0.000001")
CENT = Decimal("0.01")
PAID_STATUSES = ("paid", "settled", "closed")
NO_NAME = "(no name)"


def to_decimal(value) -> Decimal:
    """Lenient numeric coercion: None, blanks and garbage become 0."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal(0)
    try:
        d = Decimal(str(value).strip())
    except (ArithmeticError, ValueError):
        return Decimal(0)
    return d if d.is_finite() else Decimal(0)


def to_cents(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money(value) -> str:
    return f"{to_decimal(value):.2f}"


def credit_paid_amount(credit) -> Decimal:
    return to_decimal(credit.amount_paid)


def credit_balance(credit) -> Decimal:
    return max(to_decimal(credit.amount) - credit_paid_amount(credit), Decimal(0))


def is_paid_like(credit) -> bool:
    # status wins, then the legacy flag, then paid_at, then the numbers
    status = (credit.status or "").strip().lower()
    if status:
        return status in PAID_STATUSES
    if credit.is_paid is not None:
        return bool(credit.is_paid)
    if credit.paid_at is not None:
        return True
    return credit_balance(credit) <= EPSILON and to_decimal(credit.amount) > 0


def is_outstanding(credit) -> bool:
    return credit_balance(credit) > EPSILON


def group_key(credit) -> str:
    phone = (credit.customer_phone or "").strip()
    name = (credit.customer_name or "").strip()
    if credit.customer_id:
        return str(credit.customer_id)
    if phone:
        return f"phone:{phone}"
    if name:
        return f"name:{name}"
    return f"id:{credit.id}"


@dataclass
class CreditGroup:
    key: str
    customer_id: Optional[int]
    customer_name: str
    customer_phone: str
    total_amount: Decimal = Decimal(0)
    total_paid: Decimal = Decimal(0)
    total_balance: Decimal = Decimal(0)
    last_activity_at: Optional[datetime] = None
    rows: list = field(default_factory=list)  # oldest created first


@dataclass
class Allocation:
    credit: object
    amount: Decimal         # taken from the payment
    next_paid: Decimal
    next_balance: Decimal

    @property
    def settles(self) -> bool:
        return self.next_balance <= EPSILON


def _ts(value: Optional[datetime]) -> datetime:
    return value or datetime.min


def group_credits(rows) -> List[CreditGroup]:
    groups = {}

    for r in rows:
        key = group_key(r)
        phone = (r.customer_phone or "").strip()
        name = (r.customer_name or "").strip()
        activity = r.paid_at or r.created_at

        g = groups.get(key)
        if g is None:
            g = CreditGroup(
                key=key,
                customer_id=r.customer_id,
                customer_name=name or NO_NAME,
                customer_phone=phone,
                last_activity_at=activity,
            )
            groups[key] = g
        else:
            if _ts(activity) > _ts(g.last_activity_at):
                g.last_activity_at = activity
            if not g.customer_phone:
                g.customer_phone = phone
            if g.customer_name == NO_NAME and name:
                g.customer_name = name

        g.total_amount += to_decimal(r.amount)
        g.total_paid += credit_paid_amount(r)
        g.total_balance += credit_balance(r)
        g.rows.append(r)

    result = sorted(groups.values(), key=lambda g: _ts(g.last_activity_at), reverse=True)
    for g in result:
        g.rows.sort(key=lambda r: _ts(r.created_at))
    return result


def filter_groups(groups: List[CreditGroup], q: str) -> List[CreditGroup]:
    """Search over customer name, phone, any member note and the group key."""
    s = (q or "").strip().lower()
    if not s:
        return groups

    def matches(g: CreditGroup) -> bool:
        if s in g.customer_name.lower() or s in g.customer_phone.lower():
            return True
        if any(s in (r.note or "").lower() for r in g.rows):
            return True
        return s in g.key.lower()

    return [g for g in groups if matches(g)]


def allocate_payment(group: CreditGroup, amount) -> List[Allocation]:
    """
    Splits a payment across the group's open credits, oldest first.
    The payment is rounded to cents and capped at the group's outstanding
    balance.
    """
    left = min(to_cents(amount), group.total_balance)
    allocations = []

    for row in sorted(group.rows, key=lambda r: _ts(r.created_at)):
        if left <= 0:
            break
        balance = credit_balance(row)
        if balance <= 0:
            continue

        take = min(left, balance)
        next_paid = credit_paid_amount(row) + take
        next_balance = max(to_decimal(row.amount) - next_paid, Decimal(0))
        allocations.append(Allocation(row, take, next_paid, next_balance))
        left -= take

    return allocations


def newest_credit(group: CreditGroup):
    if not group.rows:
        return None
    return max(group.rows, key=lambda r: _ts(r.created_at))


def payment_memo(existing_note: Optional[str], applied, note: str) -> str:
    base = (existing_note or "").strip()
    line = f"Payment: ${money(applied)} • {note.strip()}"
    return f"{base}\n{line}".strip() if base else line
