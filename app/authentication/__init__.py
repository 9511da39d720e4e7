"""
Authentication application.

Provides the email-based User model used for buyers, sellers and staff,
plus JWT token issue endpoints for API and websocket clients.

Usage:
    from authentication.models import User
"""
