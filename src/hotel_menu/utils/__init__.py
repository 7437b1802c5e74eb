"""Utility modules: configuration, constants, messages and the CLI."""
