"""Wrappers around external services and binaries."""
