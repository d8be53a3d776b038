import pytest

from chordchart.exceptions import UnsupportedFormatError
from chordchart.formats.freeshow import FreeShowTextAdapter
from chordchart.formats.openlyrics import OpenLyricsAdapter
from chordchart.formats.show import ShowFileAdapter
from chordchart.formats.ultimate_guitar import UltimateGuitarTextAdapter
from chordchart.registry import FORMAT_NAMES, get_adapter, get_adapter_for_file


def test_format_names():
    assert FORMAT_NAMES == ["ultimate-guitar", "freeshow", "openlyrics", "show"]


@pytest.mark.parametrize(
    "name,cls",
    [
        ("ultimate-guitar", UltimateGuitarTextAdapter),
        ("freeshow", FreeShowTextAdapter),
        ("openlyrics", OpenLyricsAdapter),
        ("show", ShowFileAdapter),
    ],
)
def test_get_adapter_by_name(name, cls):
    assert isinstance(get_adapter(name), cls)


def test_get_adapter_unknown_name():
    with pytest.raises(UnsupportedFormatError, match="No adapter found for format: chordpro"):
        get_adapter("chordpro")


@pytest.mark.parametrize(
    "filename,cls",
    [
        ("song.ug", UltimateGuitarTextAdapter),
        ("song.tab", UltimateGuitarTextAdapter),
        ("song.txt", FreeShowTextAdapter),
        ("song.xml", OpenLyricsAdapter),
        ("/tmp/Song.SHOW", ShowFileAdapter),
    ],
)
def test_get_adapter_for_file(filename, cls):
    assert isinstance(get_adapter_for_file(filename), cls)


def test_get_adapter_for_unknown_extension():
    with pytest.raises(UnsupportedFormatError) as excinfo:
        get_adapter_for_file("song.docx")
    assert excinfo.value.name == "song.docx"
