"""Request and response models (Pydantic v2)."""
