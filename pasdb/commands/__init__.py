"""CLI commands for pasdb."""
