"""Infrastructure layer - configuration, database, logging and image storage."""
