"""Domain layer: containment data, scan verification and check history."""
