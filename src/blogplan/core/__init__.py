"""Content ingestion and page planning."""
