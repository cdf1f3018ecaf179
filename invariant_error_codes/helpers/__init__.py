"""Filesystem helpers for the rewrite tool."""
