"""
Upload policy for multipart requests.

Checks parsed form data against size, count and field limits before any
file is read by a route. Violations raise UploadLimitError, the upload
layer's own fault shape; the error handler translates it.
"""

import logging
from typing import Optional

from starlette.datastructures import FormData, UploadFile

logger = logging.getLogger(__name__)

LIMIT_FILE_SIZE = "LIMIT_FILE_SIZE"
LIMIT_FILE_COUNT = "LIMIT_FILE_COUNT"
LIMIT_UNEXPECTED_FILE = "LIMIT_UNEXPECTED_FILE"

UPLOAD_LIMIT_CODES = frozenset(
    {LIMIT_FILE_SIZE, LIMIT_FILE_COUNT, LIMIT_UNEXPECTED_FILE}
)


class UploadLimitError(Exception):
    """Raised when an upload breaks the configured policy.

    Attributes:
        code: One of the LIMIT_* constants.
        field: Form field that carried the offending file, if known.
    """

    def __init__(self, code: str, message: str, field: Optional[str] = None) -> None:
        if code not in UPLOAD_LIMIT_CODES:
            raise ValueError(f"Unknown upload limit code: {code}")
        super().__init__(message)
        self.code = code
        self.field = field


class UploadPolicy:
    """Size, count and field limits for file uploads.

    Args:
        max_file_size: Largest accepted file in bytes.
        max_files: Largest accepted number of files per request.
        field_name: The only form field allowed to carry files.
    """

    def __init__(self, max_file_size: int, max_files: int, field_name: str) -> None:
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.field_name = field_name

    def collect(self, form: FormData) -> list[UploadFile]:
        """Return the uploaded files in ``form`` after enforcing the policy.

        Raises:
            UploadLimitError: On an unexpected file field, too many files,
                or a file larger than the limit.
        """
        files: list[UploadFile] = []
        for key, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            if key != self.field_name:
                raise UploadLimitError(
                    LIMIT_UNEXPECTED_FILE, f"Unexpected file field: {key}", field=key
                )
            files.append(value)

        if len(files) > self.max_files:
            raise UploadLimitError(
                LIMIT_FILE_COUNT,
                f"Too many files: {len(files)} (max {self.max_files})",
                field=self.field_name,
            )

        for upload in files:
            if upload.size is not None and upload.size > self.max_file_size:
                logger.warning(
                    "Rejected upload %s: %d bytes", upload.filename, upload.size
                )
                raise UploadLimitError(
                    LIMIT_FILE_SIZE,
                    f"File {upload.filename} exceeds {self.max_file_size} bytes",
                    field=self.field_name,
                )
        return files
