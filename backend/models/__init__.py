"""Models package - Pydantic schemas, settings and domain exceptions."""
