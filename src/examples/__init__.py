"""Example programs for the managed data services."""
