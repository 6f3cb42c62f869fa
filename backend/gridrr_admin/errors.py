from __future__ import annotations


class AuthError(Exception):
    """Invalid credentials, unconfirmed email, or a bad/expired token."""


class ValidationFailed(ValueError):
    """A form failed client-side validation; raised before any network call."""


class MediaRejected(ValidationFailed):
    """The attached media has the wrong type or is too large."""


class StorageError(Exception):
    """Object storage refused or failed an operation."""


class PublishError(Exception):
    """The submission was approved but its catalog row could not be written."""

    def __init__(self, submission_id, message: str):
        super().__init__(message)
        self.submission_id = submission_id


class AlreadyListed(Exception):
    """A catalog row already exists for this website URL."""

    def __init__(self, url: str):
        super().__init__(f"A website with URL {url} is already in the catalog")
        self.url = url
