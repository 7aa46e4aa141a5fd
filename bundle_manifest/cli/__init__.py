"""Command-line helpers for manifest generation."""
