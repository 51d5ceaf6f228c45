"""
Shared OAuth2 credential lifecycle for SaaS API connectors.

Subpackages:
    authcore.oauth2: credential model, token exchange, broadcast, gated client
    authcore.errors: error taxonomy shared by all connectors
    authcore.logging: structured logging with secret redaction
"""

__version__ = "0.1.0"
