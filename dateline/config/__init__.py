"""Configuration: environment settings, logging, domain tables and prompts."""
