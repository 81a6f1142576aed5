"""Calculation services backing the HTTP API."""
