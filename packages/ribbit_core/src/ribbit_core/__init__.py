"""Shared logging and tracing setup for the ribbit services."""
