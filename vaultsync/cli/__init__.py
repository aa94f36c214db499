"""Command-line interface for vaultsync."""
