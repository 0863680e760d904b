"""REST API and persistence for campaign ledgers."""
