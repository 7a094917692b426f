"""Application layer - pipeline services and use cases."""
