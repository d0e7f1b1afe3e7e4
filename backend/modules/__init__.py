"""
Feature modules for the CuraFlow auth backend.

Each module is self-contained and holds some of:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- service.py: Business logic implementation
- repository.py: Data access for the module's tables
- exceptions.py: Module-specific exceptions

auth owns tokens, password hashing and the authorization gate.
users owns the account lifecycle and depends on auth only through
its interfaces.
"""
