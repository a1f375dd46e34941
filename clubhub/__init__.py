"""
Backend package for the club app.

This package provides a FastAPI application for user accounts, events,
media uploads, tips and the chat feed, with store and upload-storage
abstractions that can be swapped at startup.
"""
