"""Infraestrutura transversal (logging)."""
