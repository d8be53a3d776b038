class ChordChartError(Exception):
    """Base exception for chordchart."""


class ParseError(ChordChartError):
    """Raised when an input document cannot be turned into sections."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Parse error for {source}: {reason}")


class UnsupportedFormatError(ChordChartError):
    """Raised when no adapter matches the given format name or file name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No adapter found for format: {name}")
