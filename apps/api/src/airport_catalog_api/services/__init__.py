"""Catalog query, search and import services."""
