"""Adapters: backend HTTP, backend offline e persistência local."""
