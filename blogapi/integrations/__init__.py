"""
Third-party integrations (email delivery, error tracking).
"""
