"""Utility modules for logging configuration."""
