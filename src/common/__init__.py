"""Shared building blocks: error taxonomy, validators and time helpers."""
