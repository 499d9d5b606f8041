"""Idempotent loaders for fetched records."""
