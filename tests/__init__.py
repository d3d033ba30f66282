"""Tests for kubectl-login."""
