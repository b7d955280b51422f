"""Command line interface for densenets."""
