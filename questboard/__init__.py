"""Questboard progression engine."""
