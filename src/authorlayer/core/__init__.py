"""Core domain types shared by the authorship tracker."""

from .intervals import AuthorshipClaim, AuthorshipInterval

__all__ = ["AuthorshipClaim", "AuthorshipInterval"]
