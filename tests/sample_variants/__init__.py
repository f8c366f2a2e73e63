"""Variant provider namespaces used by the test suite."""
