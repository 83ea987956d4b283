"""Adaptive study-plan scheduler and topic progression for exam prep."""
