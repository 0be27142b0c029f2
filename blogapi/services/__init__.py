"""
Services - the operations behind each route.

Services take their collaborators (storage, token issuer, notifier) in
the constructor; nothing here reads global state.
"""

from blogapi.services.accounts import AccountService, LoginResult
from blogapi.services.cascade import CascadeCoordinator, CascadeReport
from blogapi.services.categories import CategoryService
from blogapi.services.comments import CommentService
from blogapi.services.posts import PostService
from blogapi.services.users import UserService
from blogapi.services.verification import VerificationService

__all__ = [
    "AccountService",
    "LoginResult",
    "CascadeCoordinator",
    "CascadeReport",
    "CategoryService",
    "CommentService",
    "PostService",
    "UserService",
    "VerificationService",
]
