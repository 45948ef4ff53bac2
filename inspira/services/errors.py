"""Domain errors raised by the services and repositories.

Every condition here is recoverable: the HTTP layer maps each class to a
status code and the process keeps serving.  Nothing below is raised for
programming errors; those stay as plain ValueError / TypeError.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for expected, caller-visible failures."""


class NotFoundError(DomainError):
    """Course, module, lesson, enrollment, coupon, user or code is absent."""


class InvalidOperationError(DomainError):
    """The request is well-formed but not allowed in the current state.

    Examples: toggling a quiz-bearing lesson, an incomplete quiz submission.
    """


class InvalidInputError(DomainError):
    """A field value is malformed (email, name, password)."""


class ConflictError(DomainError):
    """Uniqueness violated (email, coupon code, enrollment, used access code)."""


class CouponError(DomainError):
    """Base for coupon rejections; ``reason`` is a stable machine code."""

    reason = "invalid"


class CouponInactiveError(CouponError):
    reason = "inactive"


class CouponExpiredError(CouponError):
    reason = "expired"


class CouponWrongScopeError(CouponError):
    reason = "wrong_scope"


class ConcurrentUpdateError(DomainError):
    """An optimistic write lost the race against another writer."""


class PersistenceError(DomainError):
    """The backing store is unavailable or rejected the operation."""


class CouponNotFoundError(CouponError, NotFoundError):
    reason = "not_found"
