"""Request/response models."""
