"""Approval states, the transition machine, and settings."""
