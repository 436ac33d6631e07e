"""
Security test suite for the bookmarks application.

Covers authorization between accounts (IDOR prevention) and hostile input to the
CSV import.
"""
