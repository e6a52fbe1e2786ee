"""Package search service: composite package, keyword and author search over PostgreSQL."""
