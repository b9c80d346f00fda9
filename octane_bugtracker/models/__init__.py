"""Octane entity and bug parameter models."""
