"""
API end-to-end tests for the puzzle server.

This package contains tests that send requests to the puzzle API routes
through the Flask test client, against a freshly seeded puzzle catalog.
"""
