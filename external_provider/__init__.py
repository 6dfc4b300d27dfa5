"""Provider that runs external programs and persists their JSON results."""
