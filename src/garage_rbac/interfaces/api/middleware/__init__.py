"""Falcon middleware."""
