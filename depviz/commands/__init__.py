"""Commands module for depviz CLI."""
