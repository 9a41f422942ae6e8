"""Issue constructors shared by the special validators."""

from typing import Optional

from structdata.models import ValidationIssue


def error(message: str, code: str, path: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(severity='error', message=message, code=code, path=path)


def warning(message: str, code: str, path: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(severity='warning', message=message, code=code, path=path)
