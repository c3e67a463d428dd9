"""Codec configuration.

This module provides the options dataclass that tunes how a schema tree
validates itself and how its types encode and decode messages.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CodecOptions:
    """Options shared by every type below one root.

    Attributes:
        loose_default_equality: Compare values against field defaults with
            coercive equality when deciding whether to omit a field on encode
            (default True). Under loose equality ``0``, ``False``, ``""`` and
            ``"0"`` all match a numeric zero default. Set to False to omit a
            field only when its value has the default's type and equals it.

        validate_ranges: Check extension and reserved ranges when building a
            type from JSON (default False). When enabled, every range must have
            ``start <= end``, extension ranges may not overlap reserved ranges,
            and no field may use a reserved id or name.

        max_message_size: Upper bound in bytes for a decoded message or any
            nested sub-message (default None, unbounded).

    Examples:
        ```python
        from protoreflect import CodecOptions, Root

        root = Root.from_json(schema, codec_options=CodecOptions(
            loose_default_equality=False,
            max_message_size=64 * 1024,
        ))
        ```
    """

    loose_default_equality: bool = True
    validate_ranges: bool = False
    max_message_size: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.max_message_size is not None and self.max_message_size <= 0:
            raise ValueError(f"max_message_size must be > 0, got {self.max_message_size}")


DEFAULT_OPTIONS = CodecOptions()
