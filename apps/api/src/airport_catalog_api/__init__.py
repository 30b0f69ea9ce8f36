"""Airport catalog HTTP API."""
