"""Saída de terminal (Rich) usada pela CLI."""
