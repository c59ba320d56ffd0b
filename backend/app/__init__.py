"""YouTube explorer backend."""
