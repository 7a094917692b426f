"""Domain layer - entities and errors for the protest pipeline."""
