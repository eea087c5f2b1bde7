"""Taskdash - personal task board backed by a remote task API."""
