"""Shared utilities: errors, retry, outcomes, batching and ABI helpers."""
