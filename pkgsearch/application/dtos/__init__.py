"""Application DTOs (read-models, no ORM dependency)."""
