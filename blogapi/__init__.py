"""
Blog API - a REST backend for a blogging/forum platform.

Users register, verify their email and log in; they write posts with an
image, comment, like and categorize. Owners edit and delete their own
content, admins moderate by deleting.
"""

__version__ = "0.1.0"
