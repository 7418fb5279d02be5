"""
Exceptions raised by kiwiko.

Every error derives from :class:`KiwikoError`, which the CLI catches and
prints as a single ``[ERROR]`` line. Keyword arguments given to the
subclasses are kept as attributes and mirrored into ``details`` so the
message names the manifest, URL or config file involved.

The range engine in :mod:`kiwiko.core.ranges` never lets these escape:
invalid versions and ranges degrade to "incompatible" there.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class KiwikoError(Exception):
    """Base class for errors reported to the user.

    Args:
        message: What went wrong, phrased for the command line.
        details: Context appended to ``str(error)`` as ``key=value`` pairs.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Record *value* under *key* unless it is None."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Shorten response bodies and raw values for one-line messages."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ParseError(KiwikoError):
    """A ``package.json`` (or other JSON input) is malformed.

    Args:
        message: Error description.
        file_path: Manifest being read.
        field: Manifest key that failed validation, e.g. ``version``.
        value: Offending raw value; shortened in ``details``.
    """

    __slots__ = ("file_path", "field", "value")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "field", field)
        if value is not None:
            details["value"] = _truncate(value)

        super().__init__(message, details)

        self.file_path = file_path
        self.field = field
        self.value = value


class NetworkError(KiwikoError):
    """The registry could not be reached or answered with an error.

    Args:
        message: Error description.
        url: Request URL.
        status_code: HTTP status, when a response arrived.
        response_body: Response text; shortened in ``details``.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RegistryError(NetworkError):
    """The registry has no usable document for a package.

    Raised for 404 answers and for bodies that are not a packument.

    Args:
        message: Error description.
        package_name: npm package name, scope included.
        **kwargs: Forwarded to :class:`NetworkError`.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class FileOperationError(KiwikoError):
    """A manifest or config file is missing, too large or unreadable.

    Args:
        message: Error description.
        file_path: Path involved.
        operation: What was attempted, e.g. ``read`` or ``find``.
        original_error: Underlying OS or decoding error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(KiwikoError):
    """``kiwiko.toml`` or the ``"kiwiko"`` manifest section is invalid.

    Args:
        message: Error description.
        config_path: Configuration file being loaded.
        option: Offending option name, if one is to blame.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
