"""
Service layer abstraction.

Each service encapsulates the SQL and business rules of one domain
(contacts, tags, users) so that API handlers stay thin.
"""
