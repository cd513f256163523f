"""
API route handlers, one router per endpoint group (health, capture, credentials, camera).
"""
