"""Runs the analytical queries and writes each result set to CSV."""

import os
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront import queries
from storefront.config import DB_URL, REPORT_DIR
from storefront.database import create_storefront_engine
from storefront.logger import Logger
from storefront.models import Customer, Product
from storefront.tools import wait_for_postgres

# Set up logger
logger = Logger.get_logger(__name__)


def entity_columns(model, exclude=()) -> List[str]:
    return [column.key for column in model.__table__.columns if column.key not in exclude]


PRODUCT_COLUMNS = entity_columns(Product)
# Password hashes stay out of exported files
CUSTOMER_COLUMNS = entity_columns(Customer, exclude=("password",))

# Report name -> (query, CSV header)
REPORTS: Dict[str, Tuple[Callable, List[str]]] = {
    "revenue_by_category": (
        queries.revenue_by_category,
        ["category_name", "revenue", "units_sold"],
    ),
    "top_customers": (
        queries.top_customers,
        ["customer_id", "first_name", "last_name", "email", "order_count", "total_spent"],
    ),
    "customers_without_orders": (queries.customers_without_orders, CUSTOMER_COLUMNS),
    "products_above_average_price": (
        queries.products_above_average_price,
        PRODUCT_COLUMNS,
    ),
    "best_selling_products": (
        queries.best_selling_products,
        ["product_id", "name", "units_sold", "revenue"],
    ),
    "order_summaries": (
        queries.order_summaries,
        ["order_id", "customer_id", "order_date", "total_amount", "item_count", "line_total"],
    ),
    "low_stock_products": (queries.low_stock_products, PRODUCT_COLUMNS),
}


def rows_to_dataframe(rows: list, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Convert query results to a DataFrame.

    Accepts both ``Row`` tuples from column queries and mapped entities; for
    entities the mapped column attributes become the frame's columns unless
    `columns` names them. An empty result still carries `columns` as its header.
    """
    if not rows:
        return pd.DataFrame(columns=columns)

    first = rows[0]
    if hasattr(first, "_mapping"):
        frame = pd.DataFrame([dict(row._mapping) for row in rows])
        return frame[columns] if columns else frame

    if columns is None:
        columns = entity_columns(type(first))
    return pd.DataFrame(
        [{column: getattr(row, column) for column in columns} for row in rows],
        columns=columns,
    )


class ReportBuilder:
    """
    Class to run every registered analytical query and export it as CSV.
    """

    def __init__(self, db_url: str, report_dir: str):
        self.db_url = db_url
        self.report_dir = report_dir

    def build_reports(self, session: Session) -> Dict[str, pd.DataFrame]:
        """Run all queries and return their results keyed by report name"""
        reports = {}
        for name, (query, columns) in REPORTS.items():
            reports[name] = rows_to_dataframe(query(session), columns)
            logger.info(f"Report {name}: {len(reports[name])} rows")
        return reports

    def write_reports(self, reports: Dict[str, pd.DataFrame]) -> list:
        """Write each report to `<report_dir>/<name>.csv`"""
        os.makedirs(self.report_dir, exist_ok=True)
        paths = []
        for name, frame in reports.items():
            path = os.path.join(self.report_dir, f"{name}.csv")
            frame.to_csv(path, index=False)
            paths.append(path)
        logger.info(f"Wrote {len(paths)} reports to {self.report_dir}")
        return paths

    def __call__(self) -> None:
        """Main function to build reports"""
        engine = create_storefront_engine(self.db_url)

        if not wait_for_postgres(engine, max_retries=20, delay=2):
            return

        with Session(engine) as session:
            try:
                reports = self.build_reports(session)
            except SQLAlchemyError as e:
                logger.error(f"Database error: {e}")
                return

        self.write_reports(reports)


if __name__ == "__main__":
    report_builder = ReportBuilder(db_url=DB_URL, report_dir=REPORT_DIR)
    report_builder()
