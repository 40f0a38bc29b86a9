"""CLI subcommands for dbafs."""
