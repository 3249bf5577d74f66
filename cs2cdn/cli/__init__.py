"""Command line interface for cs2cdn."""
