"""Noteria API: rooms and notes over a relational store."""

__version__ = "1.0.0"
