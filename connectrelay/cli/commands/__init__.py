"""Subcommand implementations for the connectrelay CLI."""
