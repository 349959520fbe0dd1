"""Command line interface for semid."""
