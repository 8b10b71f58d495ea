"""Command line interface for fincontrol."""
