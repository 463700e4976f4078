"""
Test Suite for the Book Review API

Test Organization:
- conftest.py: Shared fixtures (in-memory database, client, sample data)
- test_auth.py: Registration, login, token handling
- test_books.py: Book CRUD, search, filter options, stats
- test_reviews.py: Review CRUD and listings
- test_ratings.py: Rating aggregation
- test_repositories.py: Data access layer and constraints

Running Tests:
    # Install with test extras
    pip install -e ".[test]"

    # Run all tests
    pytest

    # Run specific file
    pytest tests/test_ratings.py

    # Run with verbose output
    pytest -v
"""
