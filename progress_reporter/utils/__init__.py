"""Shared utilities for progress_reporter."""
