"""Catalog state, persistence and file ingestion."""
