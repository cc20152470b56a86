"""
Catalog ingestion package.

Responsibilities:
- Read the raw location, hotel and transport JSON exports.
- Normalize them into the canonical catalog columns and drop low-quality records.
- Persist the processed catalog as CSVs for the recommendation service.
"""
