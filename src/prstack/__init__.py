"""Manage stacks of dependent GitHub pull requests."""
