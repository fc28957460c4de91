"""lupo command line interface."""
