"""Statement and rate-source ingestion."""
