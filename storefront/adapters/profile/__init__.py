"""User profile adapters (saved shipping address)."""
