"""Shared doubles for the recipe catalog tests."""
