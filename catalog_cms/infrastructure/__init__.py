"""Infrastructure layer - configuration, logging, database and HTTP clients."""
