"""
Rolodex test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (models, broadcast, config, logging, SQLite store)

Run all tests:
    pytest

Run with coverage:
    pytest --cov=rolodex
"""
