# Overview: Read-only ambassador performance figures built on the income calculator.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..models import Order
from . import ambassador_service
from .ambassador_income import calculate_ambassador_income
from .order_statuses import OrderStatus, PaymentMethod


def _order_stats(ambassador_id: str) -> dict:
    rows = (
        db.session.query(
            Order.status,
            func.count(Order.id),
            func.coalesce(func.sum(Order.quantity), 0),
            func.coalesce(func.sum(Order.total_price), 0),
        )
        .filter(
            Order.ambassador_id == ambassador_id,
            Order.payment_method == PaymentMethod.AMBASSADOR_CASH.value,
        )
        .group_by(Order.status)
        .all()
    )

    by_status = {status.value: 0 for status in OrderStatus}
    tickets_sold = 0
    revenue = Decimal("0")
    for status, count, quantity, total in rows:
        by_status[status] = count
        if status == OrderStatus.PAID.value:
            tickets_sold = int(quantity)
            revenue = Decimal(str(total))

    return {
        "orders_by_status": by_status,
        "total_orders": sum(by_status.values()),
        "tickets_sold": tickets_sold,
        "revenue": float(revenue.quantize(Decimal("0.01"))),
    }


def get_ambassador_performance(ambassador_id: str) -> dict:
    """
    Sales figures for one ambassador. Only PAID cash orders count as sold
    tickets; income follows the tiered calculator and ignores commission_rate.
    """
    ambassador = ambassador_service.require_ambassador(ambassador_id)
    stats = _order_stats(ambassador.id)
    return {
        "ambassador": ambassador.to_dict(),
        **stats,
        "income": calculate_ambassador_income(stats["tickets_sold"]),
    }


def get_sales_overview() -> list[dict]:
    overview = []
    for ambassador in ambassador_service.get_all_active_ambassadors():
        stats = _order_stats(ambassador.id)
        overview.append({
            "ambassador_id": ambassador.id,
            "full_name": ambassador.full_name,
            "city": ambassador.city,
            "ville": ambassador.ville,
            "total_orders": stats["total_orders"],
            "tickets_sold": stats["tickets_sold"],
            "revenue": stats["revenue"],
            "income": calculate_ambassador_income(stats["tickets_sold"]),
        })
    overview.sort(key=lambda row: row["revenue"], reverse=True)
    return overview
