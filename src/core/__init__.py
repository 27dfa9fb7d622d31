"""
Core Domain Layer - the Hexagon.

Pure business logic with no framework dependencies:
- No Django, no HTTP, no SDKs
- Testable without a database
- Infrastructure agnostic
"""
