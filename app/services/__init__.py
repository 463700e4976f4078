"""
Services Package

Business logic kept separate from HTTP handling, so the same functions
serve routers, scripts and tests. Services raise app.exceptions errors,
never HTTPException.

Current services:
- auth.py: Registration and credential checks
- books.py: Book CRUD, search, filter options, statistics
- pagination.py: Page arithmetic and the Page result type
- rate_limiter.py: Rate limiting with slowapi
- ratings.py: Book rating aggregation
- reviews.py: Review CRUD with rating refresh
- security.py: Password hashing and JWT utilities
- validation.py: Field-level rules for book and review input
"""
