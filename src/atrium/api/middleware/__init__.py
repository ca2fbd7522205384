"""HTTP middleware (request logging)."""
