"""Infrastructure layer: database persistence and the provider HTTP client."""
