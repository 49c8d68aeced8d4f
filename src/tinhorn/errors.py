"""Exception hierarchy for tinhorn.

Content adapters never raise their own errors. The only failures a render can
hit come from the encoder (write failures) and, before rendering starts, from
the template compiler.
"""


class TinhornError(Exception):
    """Base class for all tinhorn errors."""


class TemplateError(TinhornError):
    """Raised when template source cannot be compiled."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.message = message
        self.offset = offset
        full_message = message
        if offset is not None:
            full_message += f" (at offset {offset})"
        super().__init__(full_message)


class EncoderError(TinhornError):
    """Raised when an encoder cannot write to its destination.

    A render stops at the first encoder error. Output already written is
    left in place.
    """
