"""Unit tests for kubectl-login."""
