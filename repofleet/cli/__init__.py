"""CLI command modules, registered on the group in repofleet.main."""
