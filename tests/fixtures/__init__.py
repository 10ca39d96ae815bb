"""
Test data helpers shared across the suite.
"""
from .sample_data import NOW, admin_token, book_payload, json_payload

__all__ = ["NOW", "admin_token", "book_payload", "json_payload"]
