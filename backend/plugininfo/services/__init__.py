"""Service layer: plugin metadata business logic and its collaborators."""
