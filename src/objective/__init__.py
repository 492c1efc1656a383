"""Objective: break a chat objective into tasks and track their completion."""

__version__ = "0.1.0"
