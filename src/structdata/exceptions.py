"""Exceptions raised by the structured data analyzer."""


class StructuredDataError(Exception):
    """Base class for all structdata errors."""


class DocumentLoadError(StructuredDataError):
    """The input could not be turned into a document tree."""


class ValidatorRegistrationError(StructuredDataError):
    """A special validator registry entry does not expose ``validate``."""

    def __init__(self, schema_type: str, validator: object):
        self.schema_type = schema_type
        self.validator = validator
        super().__init__(
            f"Validator registered for '{schema_type}' has no callable validate(): {validator!r}"
        )


class FetchError(StructuredDataError):
    """A page could not be downloaded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")
