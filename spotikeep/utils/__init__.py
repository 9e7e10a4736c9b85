"""Logging and credential-state helpers."""
