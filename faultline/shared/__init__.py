"""
Shared module package.

Contains cross-cutting concerns:
- Error classification and response formatting
- Process-wide fault handlers
- Security middleware
- Rate limiting
- Upload policy
- Logging configuration
"""
