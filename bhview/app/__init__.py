"""Application services: logging, settings, shortcuts and status fields."""
