"""Completion gateway, prompts and output handling."""
