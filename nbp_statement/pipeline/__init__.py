"""Enrichment pipeline: per-row enrichment, batching and sorting."""
