"""Domain types for the storefront: products, orders and purchase limits.

Nothing in this package touches HTTP, configuration or the database.
"""
