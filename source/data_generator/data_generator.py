"""Script to generate random customers, orders, and restocks, and update the storefront database."""

import random
import time
from typing import Optional

from faker import Faker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import DB_URL, GENERATOR_ITERATIONS
from storefront.database import create_storefront_engine
from storefront.exceptions import StorefrontError
from storefront.locking import reserve_stock, restock
from storefront.logger import Logger
from storefront.models import Customer, Order, Product
from storefront.tools import setup_database, wait_for_postgres

# Set up logger
logger = Logger.get_logger(__name__)

# Orders and restocks are drawn twice as often as new customers
ACTIONS = ["customer", "order", "product", "order", "product"]


class DataGenerator:
    """
    Class to generate random customers, orders, and restocks, and update the database accordingly.
    """

    def __init__(self, db_url: str, seed: Optional[int] = None, max_wait: int = 2):
        self.db_url = db_url
        self.max_wait = max_wait

        self.random = random.Random(seed)
        self.faker = Faker()
        if seed is not None:
            self.faker.seed_instance(seed)

    def generate_customer(self, session: Session) -> Customer:
        """Generate a new customer"""
        customer = Customer(
            first_name=self.faker.first_name(),
            last_name=self.faker.last_name(),
            email=self.faker.unique.email(),
        )
        customer.set_password(self.faker.password())

        session.add(customer)
        session.commit()
        logger.info(f"Generated new customer: {customer}")
        return customer

    def generate_order(self, session: Session) -> Optional[Order]:
        """Generate a new order, reserving stock for every line under a row lock"""
        customers = session.query(Customer).all()
        if not customers:
            logger.info("No customers found")
            return None

        products = session.query(Product).filter(Product.stock_quantity > 0).all()
        if not products:
            logger.info("No products in stock")
            return None

        customer = self.random.choice(customers)
        selected_products = self.random.sample(
            products, min(self.random.randint(1, 3), len(products))
        )

        order = Order(customer=customer, customer_id=customer.customer_id)
        session.add(order)

        for product in selected_products:
            quantity = min(self.random.randint(1, 3), product.stock_quantity)
            reserve_stock(session, product.product_id, quantity)
            order.add_detail(product, quantity)

        order.total_amount = order.compute_total()
        session.commit()
        logger.info(f"Generated new order: {order} with {len(selected_products)} items")
        return order

    def generate_restock(self, session: Session) -> Optional[Product]:
        """Restock a random product"""
        products = session.query(Product).all()
        if not products:
            logger.info("No products found")
            return None

        product = self.random.choice(products)
        old_stock = product.stock_quantity
        restock(session, product.product_id, self.random.randint(1, 20))

        session.commit()
        logger.info(
            f"Update product {product.name} stock: {old_stock} -> {product.stock_quantity}"
        )
        return product

    def run_action(self, session: Session, action: str):
        if action == "customer":
            return self.generate_customer(session)
        if action == "order":
            return self.generate_order(session)
        if action == "product":
            return self.generate_restock(session)
        raise ValueError(f"Unknown action '{action}'")

    def __call__(self, iterations: Optional[int] = None) -> None:
        """Main function to generate; runs forever when `iterations` is falsy"""
        engine = create_storefront_engine(self.db_url)

        # Wait for the database to be available
        if not wait_for_postgres(engine, max_retries=20, delay=2):
            return

        # Set up database
        setup_database(engine=engine)

        completed = 0
        while not iterations or completed < iterations:
            with Session(engine) as session:
                try:
                    self.run_action(session, self.random.choice(ACTIONS))
                except StorefrontError as e:
                    session.rollback()
                    logger.warning(f"Skipped action: {e}")
                except SQLAlchemyError as e:
                    session.rollback()
                    logger.error(f"Database error: {e}")

            completed += 1
            wait_time = self.random.randint(0, self.max_wait)
            logger.info(f"Waiting {wait_time} seconds before next action...")
            time.sleep(wait_time)


if __name__ == "__main__":
    data_generator = DataGenerator(db_url=DB_URL)
    data_generator(iterations=GENERATOR_ITERATIONS)
