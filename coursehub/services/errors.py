"""Exceptions shared by the service layer.

Routes translate these into HTTP responses.  StoreUnavailableError is the
one routes never catch: the application-level handler turns it into a 503
so no partially computed page is ever returned.
"""

from __future__ import annotations


class CoursehubError(Exception):
    pass


class NotFoundError(CoursehubError):
    """A referenced course, session, user or request does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ForbiddenError(CoursehubError):
    pass


class ConflictError(CoursehubError):
    """The operation would break an invariant the store must keep."""


class StoreUnavailableError(CoursehubError):
    """The backing store could not be reached.  Never retried here."""
