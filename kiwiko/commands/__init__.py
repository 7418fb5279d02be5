"""CLI subcommands for kiwiko."""
