"""Pydantic request bodies for the EDI endpoints."""

from pydantic import BaseModel, field_validator

from .. import config


class RawDocumentRequest(BaseModel):
    """A raw X12 document submitted as text."""

    content: str

    @field_validator("content")
    @classmethod
    def validate_content_size(cls, v: str) -> str:
        """Validate that the document doesn't exceed the upload limit."""
        if len(v.encode("utf-8")) > config.EDI_MAX_UPLOAD_BYTES:
            raise ValueError(
                f"Document too large. Maximum {config.EDI_MAX_UPLOAD_BYTES} bytes."
            )
        return v
