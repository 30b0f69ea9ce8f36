"""Airport catalog persistence: async engine, sessions and ORM models."""
