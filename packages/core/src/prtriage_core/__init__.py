"""Triage of open pull requests by code ownership and review activity."""
