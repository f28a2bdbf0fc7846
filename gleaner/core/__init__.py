"""Extraction, pipe, pagination and fetch engines."""
