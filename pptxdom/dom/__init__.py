"""Domain models of a decoded presentation."""
