"""Coarse per-client request throttling.

Separate from the purchase limit: this only protects the API from request
floods and knows nothing about products or orders.
"""
