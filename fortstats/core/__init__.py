"""Parsing pipeline, trackers and stats aggregation."""
