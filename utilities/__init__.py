"""
Shared configuration and logging utilities for the Bookshelf service.
"""
