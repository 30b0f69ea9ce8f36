"""Redis-backed response cache."""
