"""
Row-level locking of product stock.

Every helper takes the product row with ``SELECT ... FOR UPDATE`` so
concurrent writers to the same product are serialized by the engine until the
surrounding transaction ends. SQLite has no row locks and the clause is not
rendered there; the database-wide write lock gives the same ordering.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.exceptions import InsufficientStockError, ProductNotFoundError
from storefront.logger import Logger
from storefront.models import Product

logger = Logger.get_logger(__name__)


def lock_product(session: Session, product_id: int, nowait: bool = False) -> Product:
    """Load a product row under a row lock held until commit or rollback."""
    stmt = (
        select(Product)
        .where(Product.product_id == product_id)
        .with_for_update(nowait=nowait)
        .execution_options(populate_existing=True)
    )
    product = session.execute(stmt).scalar_one_or_none()
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def reserve_stock(session: Session, product_id: int, quantity: int) -> Product:
    """
    Decrement a product's stock under lock.

    Raises InsufficientStockError instead of letting the stock CHECK
    constraint reject the update. The caller owns the commit.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    product = lock_product(session, product_id)
    if product.stock_quantity < quantity:
        raise InsufficientStockError(product_id, quantity, product.stock_quantity)

    old_stock = product.stock_quantity
    product.stock_quantity = old_stock - quantity
    session.flush()
    logger.debug(
        f"Reserved {quantity} units of product {product_id}: {old_stock} -> {product.stock_quantity}"
    )
    return product


def restock(session: Session, product_id: int, quantity: int) -> Product:
    """Increment a product's stock under lock. The caller owns the commit."""
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    product = lock_product(session, product_id)
    old_stock = product.stock_quantity
    product.stock_quantity = old_stock + quantity
    session.flush()
    logger.debug(
        f"Restocked product {product_id}: {old_stock} -> {product.stock_quantity}"
    )
    return product
