"""CLI module for the Kong adapter."""
