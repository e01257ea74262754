# error taxonomy shared by services and the HTTP layer
# each error carries its status code and a safe, user-facing message;
# the original exception (if any) is chained with `raise ... from e` and only logged

from typing import Optional


class ChatServiceError(Exception):
    status_code = 500
    public_message = "Something went wrong."

    def __init__(self, detail: str = "", *, public_message: Optional[str] = None) -> None:
        super().__init__(detail or self.public_message)
        if public_message is not None:
            self.public_message = public_message


class ValidationError(ChatServiceError):
    status_code = 400
    public_message = "No message provided."

    def __init__(self, detail: str = "", *, public_message: Optional[str] = None) -> None:
        # validation details are safe to show to the caller
        super().__init__(detail, public_message=public_message or detail or None)


class RateLimitExceeded(ChatServiceError):
    status_code = 429
    public_message = "Too many requests, please try again later."

    def __init__(self, retry_after: float, detail: str = "") -> None:
        super().__init__(detail or f"retry after {retry_after:.0f}s")
        self.retry_after = retry_after


class AIServiceError(ChatServiceError):
    status_code = 502
    public_message = "The AI service is unavailable right now."


class UploadError(ChatServiceError):
    status_code = 502
    public_message = "Failed to upload the image."


class PersistenceError(ChatServiceError):
    status_code = 500
    public_message = "Failed to save the message."


class UnknownError(ChatServiceError):
    status_code = 500
    public_message = "Something went wrong."
