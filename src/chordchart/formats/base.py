from abc import ABC, abstractmethod

from ..models import Section, Song


class FormatAdapter(ABC):
    """Abstract base class for all import/export formats."""

    name: str = ""
    extensions: tuple[str, ...] = ()

    @classmethod
    def can_handle(cls, filename: str) -> bool:
        """Return True if *filename* carries one of this format's extensions."""
        return filename.lower().endswith(cls.extensions)

    @abstractmethod
    def parse(self, data: str, source: str = "<input>") -> Song:
        """Parse raw input and return a canonical Song.

        Chord positions must index the marker-free lyric lines by the time
        this returns.  Raises ParseError if the input is structurally broken.
        """

    @abstractmethod
    def render(self, song: Song) -> str:
        """Serialize *song* in this format."""


class TextFormatAdapter(FormatAdapter):
    """A plain-text chart format made of ``[Header]`` blocks."""

    @abstractmethod
    def parse_sections(self, text: str) -> list[Section]:
        """Parse chart text into sections; empty input gives an empty list."""

    def parse(self, data: str, source: str = "<input>") -> Song:
        return Song(sections=self.parse_sections(data))
