"""
Tests for the analytical queries, run against the seed data set
"""

import uuid

import pytest

from storefront import queries

ADA = uuid.UUID("0b0f0f4e-6f6d-4c6c-9b0e-1d2a3c4b5a61")


class TestCatalogQueries:
    def test_products_by_category(self, seeded_session):
        products = queries.products_by_category(seeded_session, "Books")

        assert [product.name for product in products] == [
            "Designing Data-Intensive Applications",
            "The Pragmatic Programmer",
        ]

    def test_products_by_unknown_category(self, seeded_session):
        assert queries.products_by_category(seeded_session, "Garden") == []

    def test_products_above_average_price(self, seeded_session):
        products = queries.products_above_average_price(seeded_session)

        assert [product.name for product in products] == [
            "Wireless Headphones",
            "Chef Knife",
            "Designing Data-Intensive Applications",
            "The Pragmatic Programmer",
        ]

    def test_low_stock_products(self, seeded_session):
        products = queries.low_stock_products(seeded_session, threshold=5)

        assert [(p.name, p.stock_quantity) for p in products] == [
            ("Running Socks", 0),
            ("French Press", 3),
        ]


class TestSalesQueries:
    def test_revenue_by_category(self, seeded_session):
        rows = queries.revenue_by_category(seeded_session)

        assert [row.category_name for row in rows] == [
            "Home & Kitchen",
            "Electronics",
            "Books",
            "Sports",
        ]
        revenue = {row.category_name: float(row.revenue) for row in rows}
        assert revenue["Home & Kitchen"] == pytest.approx(152.99)
        assert revenue["Electronics"] == pytest.approx(148.99)
        assert revenue["Books"] == pytest.approx(90.75)
        assert revenue["Sports"] == pytest.approx(39.98)
        assert {row.category_name: row.units_sold for row in rows}["Home & Kitchen"] == 3

    def test_best_selling_products(self, seeded_session):
        rows = queries.best_selling_products(seeded_session, limit=3)

        assert [(row.name, row.units_sold) for row in rows] == [
            ("Chef Knife", 2),
            ("USB-C Charger", 2),
            ("Yoga Mat", 2),
        ]

    def test_order_summaries(self, seeded_session):
        rows = queries.order_summaries(seeded_session)

        assert len(rows) == 5
        assert [row.item_count for row in rows] == [2, 1, 1, 2, 1]
        for row in rows:
            assert float(row.line_total) == pytest.approx(float(row.total_amount))


class TestCustomerQueries:
    def test_top_customers(self, seeded_session):
        rows = queries.top_customers(seeded_session, limit=2)

        assert [row.email for row in rows] == [
            "ada.lovelace@example.com",
            "alan.turing@example.org",
        ]
        assert rows[0].order_count == 2
        assert float(rows[0].total_spent) == pytest.approx(197.74)

    def test_customers_without_orders(self, seeded_session):
        customers = queries.customers_without_orders(seeded_session)

        assert [customer.last_name for customer in customers] == ["Liskov"]

    def test_customer_order_history(self, seeded_session):
        history = queries.customer_order_history(seeded_session, ADA)

        assert len(history) == 3
        assert all(entry.customer_id == ADA for entry in history)
        assert [entry.product_id for entry in history][-1] == 4

    def test_customer_order_history_unknown_customer(self, seeded_session):
        assert queries.customer_order_history(seeded_session, uuid.uuid4()) == []
