"""Analytical queries over the storefront schema."""

from typing import List

from sqlalchemy import desc, exists, func
from sqlalchemy.orm import Session

from storefront.models import (
    Category,
    Customer,
    Order,
    OrderDetail,
    OrderHistory,
    Product,
)

LINE_TOTAL = OrderDetail.quantity * OrderDetail.unit_price


def products_by_category(session: Session, category_name: str) -> List[Product]:
    """Products in the named category, alphabetically."""
    return (
        session.query(Product)
        .join(Product.category)
        .filter(Category.category_name == category_name)
        .order_by(Product.name)
        .all()
    )


def revenue_by_category(session: Session) -> list:
    """Revenue and units sold per category, highest revenue first."""
    return (
        session.query(
            Category.category_name,
            func.sum(LINE_TOTAL).label("revenue"),
            func.sum(OrderDetail.quantity).label("units_sold"),
        )
        .join(Product, Product.category_id == Category.category_id)
        .join(OrderDetail, OrderDetail.product_id == Product.product_id)
        .group_by(Category.category_name)
        .order_by(desc("revenue"), Category.category_name)
        .all()
    )


def top_customers(session: Session, limit: int = 5) -> list:
    """Customers ranked by the sum of their order totals."""
    return (
        session.query(
            Customer.customer_id,
            Customer.first_name,
            Customer.last_name,
            Customer.email,
            func.count(Order.order_id).label("order_count"),
            func.sum(Order.total_amount).label("total_spent"),
        )
        .join(Order, Order.customer_id == Customer.customer_id)
        .group_by(
            Customer.customer_id,
            Customer.first_name,
            Customer.last_name,
            Customer.email,
        )
        .order_by(desc("total_spent"), Customer.email)
        .limit(limit)
        .all()
    )


def customers_without_orders(session: Session) -> List[Customer]:
    """Customers that have never placed an order."""
    has_order = exists().where(Order.customer_id == Customer.customer_id)
    return session.query(Customer).filter(~has_order).order_by(Customer.email).all()


def products_above_average_price(session: Session) -> List[Product]:
    """Products priced above the catalog-wide average, most expensive first."""
    average_price = session.query(func.avg(Product.price)).scalar_subquery()
    return (
        session.query(Product)
        .filter(Product.price > average_price)
        .order_by(Product.price.desc(), Product.name)
        .all()
    )


def best_selling_products(session: Session, limit: int = 5) -> list:
    """Products ranked by total quantity sold."""
    return (
        session.query(
            Product.product_id,
            Product.name,
            func.sum(OrderDetail.quantity).label("units_sold"),
            func.sum(LINE_TOTAL).label("revenue"),
        )
        .join(OrderDetail, OrderDetail.product_id == Product.product_id)
        .group_by(Product.product_id, Product.name)
        .order_by(desc("units_sold"), Product.name)
        .limit(limit)
        .all()
    )


def order_summaries(session: Session) -> list:
    """
    One row per order with its line count and the sum of its lines.

    Orders without lines are kept with zero counts (outer join).
    """
    return (
        session.query(
            Order.order_id,
            Order.customer_id,
            Order.order_date,
            Order.total_amount,
            func.count(OrderDetail.order_detail_id).label("item_count"),
            func.coalesce(func.sum(LINE_TOTAL), 0).label("line_total"),
        )
        .outerjoin(OrderDetail, OrderDetail.order_id == Order.order_id)
        .group_by(
            Order.order_id,
            Order.customer_id,
            Order.order_date,
            Order.total_amount,
        )
        .order_by(Order.order_date, Order.order_id)
        .all()
    )


def customer_order_history(session: Session, customer_id) -> List[OrderHistory]:
    """Audit rows for one customer, oldest first."""
    return (
        session.query(OrderHistory)
        .filter(OrderHistory.customer_id == customer_id)
        .order_by(OrderHistory.order_date, OrderHistory.history_id)
        .all()
    )


def low_stock_products(session: Session, threshold: int = 5) -> List[Product]:
    return (
        session.query(Product)
        .filter(Product.stock_quantity <= threshold)
        .order_by(Product.stock_quantity, Product.name)
        .all()
    )
