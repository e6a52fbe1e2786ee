"""Core: settings, lifespan, exception handlers."""
