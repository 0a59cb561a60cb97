"""Route group registration."""
