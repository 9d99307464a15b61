"""
Error taxonomy for the upload pipeline.

Only ValidationError, PersistenceError and DispatchError ever reach an HTTP
caller (from intake). Everything raised inside the detached task ends up as a record
status of "error" and a log line.
"""


class UploadPipelineError(Exception):
    """Base class for every error the upload pipeline raises on purpose."""


class ValidationError(UploadPipelineError):
    """Caller supplied a missing or malformed file/metadata field."""


class PersistenceError(UploadPipelineError):
    """The record store could not create or update a record."""


class DispatchError(UploadPipelineError):
    """The background pipeline could not be queued."""


class CredentialsMissingError(UploadPipelineError):
    """Video host credentials are not configured."""


class UploadInitError(UploadPipelineError):
    """The video host rejected the upload-target request."""


class UploadTransferError(UploadPipelineError):
    """Streaming the file bytes to the upload target failed."""


class VideoHostError(UploadPipelineError):
    """A status query against the video host failed or returned garbage."""


class PollTimeoutError(UploadPipelineError):
    """The polling budget ran out before a result was observed."""

    def __init__(self, attempts: int):
        super().__init__(f"No result after {attempts} attempt(s)")
        self.attempts = attempts
