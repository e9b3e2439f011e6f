"""Packaged data: default configuration and JSON schemas."""
