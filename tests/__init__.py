"""
Test suite for the hierarchy mapping reconciliation service.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_reconciliation_engine.py -v
"""
