"""Pydantic request models for the Startech API."""
