"""CLI subcommands for zigdeps."""
