# app/extraction/errors.py


class ExtractionError(Exception):
    """Base error for failures inside the extraction pipeline."""


class RenderError(ExtractionError):
    """A page could not be rasterized. Fatal for the whole run."""

    def __init__(self, page_number: int, message: str):
        super().__init__(message)
        self.page_number = page_number
