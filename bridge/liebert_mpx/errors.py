# Liebert MPX Bridge
# Created by Matthew Valancy, Valpatel Software LLC
# Copyright 2026 GPL-3.0 License
# https://github.com/mvalancy/CyberPower-PDU

"""Error taxonomy for MPX page parsing and device access.

Parsers and builders raise on the first problem they find and never
fall back to a default value:

  StructureError     the page does not have the expected shape
  UnrecognizedValue  a value was read but is not in the vendor vocabulary
  MissingField       a table does not contain a required label
  TransportError     the device could not be reached or refused a request
"""


class MPXError(Exception):
    """Base class for everything raised by this package."""


class StructureError(MPXError):
    """Raised when the document tree has an unexpected shape."""


class UnrecognizedValue(MPXError):
    """Raised when a string is outside a closed vendor vocabulary."""

    def __init__(self, vocabulary: str, value: str, label: str | None = None):
        self.vocabulary = vocabulary
        self.value = value
        self.label = label
        where = f" for {label!r}" if label else ""
        super().__init__(f"unrecognized {vocabulary} {value!r}{where}")


class MissingField(MPXError):
    """Raised when a required label is absent from a RawTable."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"missing field {label!r}")


class TransportError(MPXError):
    """Raised when an HTTP request to the PDU fails."""

    def __init__(self, url: str, status: int | None = None, reason: str = ""):
        self.url = url
        self.status = status
        if status is not None:
            msg = f"{url}: HTTP {status}"
        else:
            msg = f"{url}: {reason or 'request failed'}"
        super().__init__(msg)
