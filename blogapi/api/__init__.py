"""
HTTP layer - routers, dependencies and the app factory.
"""
