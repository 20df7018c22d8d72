"""
Divyang Portal Yojana Assistant
Chat service for login, registration and welfare scheme questions
"""

__version__ = "1.0.0"
