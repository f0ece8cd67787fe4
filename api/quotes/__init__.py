"""
Quotes feature: HTTP router, service layer and SQL repository.
"""
