"""
DitherMode - Quantisation Strategy Tags
=======================================
Plain int tags, the same way the driver layer declares PanelState.

Files named ``DD_MM_X_name.ext`` pick their mode through the third
segment X:

    F = Floyd-Steinberg   H = Halftone   O = Ordered
    P = Pop-art           N = None (nearest palette colour)
"""
import numbers
import os

from ..errors import InputError


class DitherMode:
    """
    Dither mode enumeration.

    Values are stable and may be stored; the engine dispatches on them.
    """
    NONE = 0
    FLOYD_STEINBERG = 1
    HALFTONE = 2
    ORDERED = 3
    POP_ART = 4

    _names = {
        0: "NONE",
        1: "FLOYD_STEINBERG",
        2: "HALFTONE",
        3: "ORDERED",
        4: "POP_ART",
    }

    _tags = {
        "N": 0,
        "F": 1,
        "H": 2,
        "O": 3,
        "P": 4,
    }

    _aliases = {
        "floyd": 1,
        "floyd-steinberg": 1,
        "fs": 1,
        "popart": 4,
        "pop-art": 4,
        "bayer": 3,
    }

    @classmethod
    def name(cls, mode: int) -> str:
        """Get human-readable mode name."""
        return cls._names.get(mode, f"UNKNOWN({mode})")

    @classmethod
    def all(cls) -> tuple:
        return tuple(cls._names)

    @classmethod
    def is_valid(cls, mode) -> bool:
        return (
            isinstance(mode, numbers.Integral)
            and not isinstance(mode, bool)
            and int(mode) in cls._names
        )

    @classmethod
    def tag(cls, mode: int) -> str:
        """Single-letter filename tag for a mode."""
        for letter, value in cls._tags.items():
            if value == mode:
                return letter
        raise InputError(f"Unknown dither mode {mode!r}")

    @classmethod
    def parse(cls, text: str) -> int:
        """
        Resolve a mode from a letter tag or a name.

        Accepts "F", "floyd_steinberg", "Pop-Art" and similar,
        case-insensitive.

        Raises:
            InputError: If the text names no mode
        """
        key = text.strip()
        if len(key) == 1 and key.upper() in cls._tags:
            return cls._tags[key.upper()]

        lowered = key.lower()
        if lowered in cls._aliases:
            return cls._aliases[lowered]
        for value, name in cls._names.items():
            if name.lower() == lowered.replace("-", "_"):
                return value
        raise InputError(f"Unknown dither mode {text!r}")

    @classmethod
    def from_filename(cls, path: str, default: int = FLOYD_STEINBERG) -> int:
        """
        Read the mode from a ``DD_MM_X_name.ext`` filename.

        Names that do not follow the convention yield `default`. A
        conforming name with an unknown X raises InputError.
        """
        stem = os.path.splitext(os.path.basename(path))[0]
        parts = stem.split("_", 3)
        if len(parts) < 4:
            return default

        day, month, tag = parts[0], parts[1], parts[2]
        if not (len(day) == 2 and day.isdigit() and len(month) == 2 and month.isdigit()):
            return default
        if len(tag) != 1:
            return default
        if tag.upper() not in cls._tags:
            raise InputError(f"Unknown dither tag {tag!r} in filename {path!r}")
        return cls._tags[tag.upper()]
