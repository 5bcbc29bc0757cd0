"""SQLAlchemy ORM models for categories, products, customers, orders, order details and order history."""

import uuid
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

from storefront.passwords import hash_password, verify_password

Base = declarative_base()

# Rendered as a SQL string literal in the CHECK constraint; keep it free of backslashes
EMAIL_PATTERN = r"^[A-Za-z0-9._+-]+@[A-Za-z0-9.-]+[.][A-Za-z]{2,}$"

MONEY = Numeric(10, 2)


class Category(Base):
    """
    Category model grouping products in the catalog.
    """

    __tablename__ = "category"

    category_id = Column(Integer, primary_key=True, autoincrement=True)
    category_name = Column(String(100), nullable=False, unique=True)

    # Relationship with products
    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.category_id}, name='{self.category_name}')>"


class Product(Base):
    """
    Product model representing items available for purchase.
    """

    __tablename__ = "product"
    __table_args__ = (
        CheckConstraint(
            "stock_quantity >= 0", name="ck_product_stock_quantity_non_negative"
        ),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        Index("ix_product_category_id", "category_id"),
    )

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(
        Integer, ForeignKey("category.category_id"), nullable=False
    )
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(MONEY, nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    sold_by = Column(String(100), nullable=True)

    # Relationship with category and order details
    category = relationship("Category", back_populates="products")
    order_details = relationship("OrderDetail", back_populates="product")

    def __repr__(self):
        return (
            f"<Product(id={self.product_id}, name='{self.name}', price='{self.price}', "
            f"stock={self.stock_quantity})>"
        )


class Customer(Base):
    """
    Customer model representing a registered shopper.

    The email column is validated by the engine with a regular-expression
    CHECK constraint; `password` only ever holds a hash.
    """

    __tablename__ = "customer"

    customer_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)

    # Relationship with orders
    orders = relationship("Order", back_populates="customer")

    def set_password(self, plain_password: str) -> None:
        self.password = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        return verify_password(plain_password, self.password)

    def __repr__(self):
        return f"<Customer(id={self.customer_id}, email='{self.email}')>"


Customer.__table__.append_constraint(
    CheckConstraint(
        Customer.__table__.c.email.regexp_match(EMAIL_PATTERN),
        name="ck_customer_email_format",
    )
)


class Order(Base):
    """
    Order model representing a customer purchase.
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "total_amount >= 0", name="ck_orders_total_amount_non_negative"
        ),
        Index("ix_orders_customer_id", "customer_id"),
        Index("ix_orders_order_date", "order_date"),
    )

    order_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id = Column(Uuid, ForeignKey("customer.customer_id"), nullable=False)
    order_date = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    total_amount = Column(MONEY, nullable=False, default=Decimal("0.00"))

    # Relationship with customer and details
    customer = relationship("Customer", back_populates="orders")
    details = relationship("OrderDetail", back_populates="order")

    def add_detail(self, product: Product, quantity: int, unit_price=None):
        """
        Attach a line for `product`, priced at the product's current price by default.

        The line joins the session through `Order.details`; it is inserted
        with the order's next flush.
        """
        detail = OrderDetail(
            customer_id=self.customer_id,
            quantity=quantity,
            unit_price=product.price if unit_price is None else unit_price,
        )
        self.details.append(detail)
        detail.product = product
        # Orders built from a Customer object have no customer_id until flushed
        if detail.customer_id is None and self.customer is not None:
            detail.customer = self.customer
        return detail

    def compute_total(self) -> Decimal:
        return sum(
            (Decimal(str(detail.unit_price)) * detail.quantity for detail in self.details),
            Decimal("0.00"),
        )

    def __repr__(self):
        return f"<Order(id={self.order_id}, customer_id={self.customer_id}, total=${self.total_amount})>"


class OrderDetail(Base):
    """
    OrderDetail model representing individual lines within an order.

    `customer_id` duplicates the owning order's customer.
    """

    __tablename__ = "order_details"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_details_quantity_positive"),
        CheckConstraint(
            "unit_price >= 0", name="ck_order_details_unit_price_non_negative"
        ),
        Index("ix_order_details_order_id", "order_id"),
        Index("ix_order_details_product_id", "product_id"),
        Index("ix_order_details_customer_id", "customer_id"),
    )

    order_detail_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.order_id"), nullable=False)
    product_id = Column(Integer, ForeignKey("product.product_id"), nullable=False)
    customer_id = Column(Uuid, ForeignKey("customer.customer_id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(MONEY, nullable=False)

    # Relationship with order, product and customer
    order = relationship("Order", back_populates="details")
    product = relationship("Product", back_populates="order_details")
    customer = relationship("Customer")

    def __repr__(self):
        return f"<OrderDetail(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"


class OrderHistory(Base):
    """
    Append-only audit copy of order_details.

    Rows are written only by the order_details insert trigger (see
    `storefront.triggers`); the engine rejects updates and deletes.
    """

    __tablename__ = "order_history"
    __table_args__ = (Index("ix_order_history_customer_id", "customer_id"),)

    history_id = Column(Integer, primary_key=True, autoincrement=True)
    order_detail_id = Column(Uuid, nullable=False, unique=True)
    customer_id = Column(Uuid, nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False)
    order_id = Column(Uuid, nullable=False)
    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    recorded_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self):
        return f"<OrderHistory(order_detail_id={self.order_detail_id}, order_id={self.order_id})>"
