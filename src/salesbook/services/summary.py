from __future__ import annotations

from dataclasses import dataclass

from ..models.results import DEFAULT_DATE_FORMAT, ContactEntry, CustomerOrderLine, TopCustomer

"""Text rendering of query results and the end-of-session SUMMARY line.

Format of the summary line (without the SUMMARY label added by the logger):
    queries={n} mutations={n} rejected={n} failed={n}
"""

__all__ = [
    "SessionStats",
    "render_summary_line",
    "render_order_line",
    "render_top_customer",
    "render_contact",
]


@dataclass
class SessionStats:
    """Counters for one operator session."""
    queries: int = 0  # 成功した読み取り操作
    mutations: int = 0  # 保存まで完了した変更操作
    rejected: int = 0  # NotFound / Duplicate などの業務的な拒否
    failed: int = 0  # Parse / Persistence などの失敗


def render_summary_line(stats: SessionStats) -> str:
    """Render the session counters.

    Examples:
        >>> render_summary_line(SessionStats(queries=3, mutations=1))
        'queries=3 mutations=1 rejected=0 failed=0'
    """
    return (
        f"queries={stats.queries} "
        f"mutations={stats.mutations} "
        f"rejected={stats.rejected} "
        f"failed={stats.failed}"
    )


def render_order_line(line: CustomerOrderLine, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return (
        f"Contact person: {line.contact_person}, "
        f"Quantity: {line.quantity}, "
        f"Price: {line.price}, "
        f"Order date: {line.order_date_text(date_format)}"
    )


def render_top_customer(top: TopCustomer) -> str:
    return f"Top customer: {top.contact_person}, Orders: {top.order_count}"


def render_contact(entry: ContactEntry) -> str:
    return f"Organization: {entry.organization_name}, Contact person: {entry.contact_person}"
