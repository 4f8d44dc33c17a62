"""Pydantic schemas for relay messages and HTTP responses."""
