from .exceptions import UnsupportedFormatError
from .formats.base import FormatAdapter
from .formats.freeshow import FreeShowTextAdapter
from .formats.openlyrics import OpenLyricsAdapter
from .formats.show import ShowFileAdapter
from .formats.ultimate_guitar import UltimateGuitarTextAdapter

_ADAPTERS: list[type[FormatAdapter]] = [
    UltimateGuitarTextAdapter,
    FreeShowTextAdapter,
    OpenLyricsAdapter,
    ShowFileAdapter,
]

FORMAT_NAMES = [cls.name for cls in _ADAPTERS]


def get_adapter(name: str) -> FormatAdapter:
    """Return an instantiated adapter for the format called *name*.

    Raises UnsupportedFormatError if no adapter matches.
    """
    for cls in _ADAPTERS:
        if cls.name == name:
            return cls()
    raise UnsupportedFormatError(name)


def get_adapter_for_file(filename: str) -> FormatAdapter:
    """Return an adapter chosen by *filename*'s extension.

    Raises UnsupportedFormatError if no adapter claims the extension.
    """
    for cls in _ADAPTERS:
        if cls.can_handle(filename):
            return cls()
    raise UnsupportedFormatError(filename)
