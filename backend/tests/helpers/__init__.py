"""Shared helpers for API tests."""
