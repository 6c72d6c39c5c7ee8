from typing import Optional


class BoardError(Exception):
    """Base class for every failure the board core reports to the user"""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or self.default_message


class ValidationError(BoardError):
    """Bad user input, detected before any I/O happens"""

    def __init__(self, message: str, user_message: Optional[str] = None):
        # validation messages are already written for the user
        super().__init__(message, user_message or message)


class DataAccessError(BoardError):
    """A DataStore listing, lookup or write failed"""
    default_message = "Could not reach the server. Please try again."


class CommentSubmitError(BoardError):
    """The durable write of an optimistic comment failed"""
    default_message = "Failed to post comment. Please try again."


class UploadError(BoardError):
    """Uploading an image to blob storage failed"""
    default_message = "Failed to upload image. Please try again."


class NavigationError(BoardError):
    """A view transition was requested from a mode that does not allow it"""
    default_message = "That action is not available here."
