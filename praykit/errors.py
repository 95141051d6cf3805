"""
Error types raised by the praykit codecs.

Every codec function raises one of these on the first problem it finds; no
decoder returns a partial archive or a partial frame. They all derive from
``ValueError`` so callers that only care about "bad input" can catch that.
"""


class PrayError(ValueError):
    """Base class for all codec errors."""


class InvalidMagic(PrayError):
    """The archive does not start with the "PRAY" magic."""


class TruncatedInput(PrayError):
    """The buffer ended in the middle of a header, string, table entry or block."""


class DecompressionFailure(PrayError):
    """A compressed block payload is not a valid zlib stream."""


class InvalidImageDimensions(PrayError):
    """A sprite frame has dimensions the format does not allow."""


class InvalidPixelData(PrayError):
    """Scanline or run data does not describe the declared frame."""


class UnsupportedFileType(PrayError):
    """A file's extension is not one the archive or sprite codecs accept."""


class ValueOutOfRange(PrayError):
    """An integer field does not fit in its fixed-width wire slot."""
