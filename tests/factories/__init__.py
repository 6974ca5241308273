"""Test factories for creating model instances."""
