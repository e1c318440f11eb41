# Path: doc2xbrl/tests/fixtures/__init__.py
"""Sample documents for doc2xbrl tests."""
