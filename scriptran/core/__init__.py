"""Core models, errors and orchestration."""
