"""Shared helpers for logging, HTTP access and text formatting."""
