"""Configuration for the receipt print server."""
