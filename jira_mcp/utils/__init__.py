"""Shared utilities: errors, ADF conversion, logging."""
