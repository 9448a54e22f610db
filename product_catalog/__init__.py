"""Product catalog category service.

Category hierarchy management on top of async SQLAlchemy.
"""
