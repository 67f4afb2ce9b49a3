"""Catalog runtime: workspace registry, mirror engine and host layers."""
