"""Rewrite metadata of unpushed git commits with a backup branch for undo."""
