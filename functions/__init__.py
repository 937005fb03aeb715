"""Server-side functions that need the service-role key."""
