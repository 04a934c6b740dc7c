# mushi/core/error_messages.py
from fastapi import HTTPException, status


class ErrorResponses:
    INVALID_TOKEN = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing session token",
    )
    TEMPLATE_NOT_FOUND = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Template not found",
    )
    INVALID_FILE_TYPE = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid file type. Please upload a JPEG, PNG, or GIF image.",
    )
    FILE_TOO_LARGE = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="File size too large. Please upload an image smaller than 5MB.",
    )
    UPLOAD_FAILED = HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Failed to upload image to storage",
    )
