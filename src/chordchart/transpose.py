"""Chord algebra: normalization, transposition and key detection.

Chords follow ``Root[#][Suffix][/Bass]`` where the suffix (``m``, ``maj7``,
``sus4``, ...) is passed through untouched.  Flats are rewritten as sharps
before any arithmetic, so every result is sharp-spelled::

    >>> transpose_chord("Bb", 1)
    'B'
    >>> transpose_chord("C#m7/G#", 2)
    'D#m7/A#'
"""

import copy
import logging
from collections import Counter

from .models import Section, Song

logger = logging.getLogger(__name__)

NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

FLAT_TO_SHARP = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}

# I, ii, iii, IV, V, vi, vii° for every major key.
DIATONIC_CHORDS = {
    "C": ["C", "Dm", "Em", "F", "G", "Am", "Bdim"],
    "C#": ["C#", "D#m", "Fm", "F#", "G#", "A#m", "Cdim"],
    "D": ["D", "Em", "F#m", "G", "A", "Bm", "C#dim"],
    "D#": ["D#", "Fm", "Gm", "G#", "A#", "Cm", "Ddim"],
    "E": ["E", "F#m", "G#m", "A", "B", "C#m", "D#dim"],
    "F": ["F", "Gm", "Am", "A#", "C", "Dm", "Edim"],
    "F#": ["F#", "G#m", "A#m", "B", "C#", "D#m", "Fdim"],
    "G": ["G", "Am", "Bm", "C", "D", "Em", "F#dim"],
    "G#": ["G#", "A#m", "Cm", "C#", "D#", "Fm", "Gdim"],
    "A": ["A", "Bm", "C#m", "D", "E", "F#m", "G#dim"],
    "A#": ["A#", "Cm", "Dm", "D#", "F", "Gm", "Adim"],
    "B": ["B", "C#m", "D#m", "E", "F#", "G#m", "A#dim"],
}


# ---------------------------------------------------------------------------
# Decomposition
# ---------------------------------------------------------------------------


def normalize_chord(chord: str) -> str:
    """Rewrite a leading flat root as its sharp equivalent (``Bbm`` -> ``A#m``)."""
    for flat, sharp in FLAT_TO_SHARP.items():
        if chord.startswith(flat):
            return sharp + chord[len(flat):]
    return chord


def extract_root(chord: str) -> str:
    if len(chord) > 1 and chord[1] == "#":
        return chord[:2]
    return chord[:1]


def extract_suffix(chord: str) -> str:
    if len(chord) > 1 and chord[1] == "#":
        return chord[2:]
    return chord[1:]


def extract_bass(chord: str) -> str | None:
    """Return the normalized bass note of a slash chord, or None."""
    parts = chord.split("/")
    if len(parts) > 1:
        return normalize_chord(parts[1])
    return None


# ---------------------------------------------------------------------------
# Transposition
# ---------------------------------------------------------------------------


def transpose_chord(chord: str, semitones: int) -> str:
    """Move *chord* by *semitones*, keeping its suffix.

    A chord whose root is not one of the twelve notes comes back unchanged.
    """
    normalized = normalize_chord(chord)

    if "/" in normalized:
        main, bass = normalized.split("/", 1)
        return f"{transpose_chord(main, semitones)}/{transpose_chord(bass, semitones)}"

    root = extract_root(normalized)
    if root not in NOTES:
        return chord
    index = (NOTES.index(root) + semitones + 12) % 12
    return NOTES[index] + extract_suffix(normalized)


def semitones_between(from_key: str, to_key: str) -> int:
    """Upward distance from *from_key* to *to_key*, always 0-11.

    Never takes the short way round: C -> B is 11, not -1.  Unknown keys
    give 0.
    """
    from_key = normalize_chord(from_key)
    to_key = normalize_chord(to_key)
    if from_key not in NOTES or to_key not in NOTES:
        return 0
    return (NOTES.index(to_key) - NOTES.index(from_key) + 12) % 12


def parse_transpose_input(value: str, original_key: str) -> int:
    """Turn user input into a semitone count.

    ``"+2"`` / ``"-3"`` are literal offsets, a note name such as ``"G"`` or
    ``"Bb"`` is the distance from *original_key*, anything else is 0.
    """
    value = value.strip()
    if not value:
        return 0
    if value[0] in "+-":
        try:
            return int(value)
        except ValueError:
            return 0
    note = normalize_chord(value)
    if note in NOTES:
        return semitones_between(original_key, note)
    return 0


# ---------------------------------------------------------------------------
# Key detection
# ---------------------------------------------------------------------------


def _matches_diatonic(chord: str, diatonic: list[str]) -> bool:
    # exact, major version of a minor chord, or minor version of a major chord
    return any(
        chord == entry or chord.replace("m", "", 1) == entry or chord + "m" == entry
        for entry in diatonic
    )


def detect_key(chords: list[str]) -> str:
    """Return the major key whose diatonic chords best explain *chords*.

    Every chord that is diatonic to a key (major/minor quality may be
    flipped) scores for that key:

    * +1 for being diatonic
    * +2 when its root is the tonic, +3 more if it opens or closes the list
    * +1 when its root is the dominant, +2 more for a seventh chord
    * +1 when its root is the subdominant

    A key whose tonic, subdominant and dominant roots all occur gets a flat
    +3.  Only a strictly higher total replaces the current best, so ties go
    to the key that comes first in :data:`NOTES`; that ordering is arbitrary
    but kept for stable output.  With no score at all the most common root
    wins, and an empty list gives ``"C"``.
    """
    if not chords:
        return "C"

    normalized = []
    for chord in chords:
        chord = normalize_chord(chord)
        normalized.append(extract_root(chord) + extract_suffix(chord))
    roots = [extract_root(chord) for chord in normalized]
    root_counts = Counter(roots)
    last = len(normalized) - 1

    scores = dict.fromkeys(NOTES, 0)
    for key, diatonic in DIATONIC_CHORDS.items():
        tonic = extract_root(diatonic[0])
        subdominant = extract_root(diatonic[3])
        dominant = extract_root(diatonic[4])

        for index, chord in enumerate(normalized):
            if not _matches_diatonic(chord, diatonic):
                continue
            scores[key] += 1
            root = roots[index]
            if root == tonic:
                scores[key] += 2
                if index in (0, last):
                    scores[key] += 3
            if root == dominant:
                scores[key] += 1
                if "7" in extract_suffix(chord):
                    scores[key] += 2
            if root == subdominant:
                scores[key] += 1

        if tonic in root_counts and subdominant in root_counts and dominant in root_counts:
            scores[key] += 3

    best_key, best_score = "C", 0
    for key in NOTES:
        if scores[key] > best_score:
            best_key, best_score = key, scores[key]

    if best_score == 0:
        logger.debug("No diatonic match for %s, falling back to most common root", chords)
        return root_counts.most_common(1)[0][0] or "C"
    return best_key


# ---------------------------------------------------------------------------
# Song-level transposition
# ---------------------------------------------------------------------------


def transpose_sections(sections: list[Section], semitones: int) -> list[Section]:
    """Return copies of *sections* with every chord moved by *semitones*.

    Only ``Chord.text`` changes; positions and lines are left alone.
    """
    result = copy.deepcopy(sections)
    for section in result:
        for chord in section.chords:
            chord.text = transpose_chord(chord.text, semitones)
    return result


def transpose_song(song: Song, value: str) -> Song:
    """Apply a transpose request such as ``"+2"`` or ``"G"`` to *song* in place.

    The song's key is detected on first use and the untransposed sections
    are snapshotted, so every request is computed from the original chords
    and repeating one is harmless.  An empty *value* restores the snapshot.
    """
    if not song.original_key:
        song.original_key = detect_key(song.chord_texts())
        logger.debug("Detected key %s for %r", song.original_key, song.title)
    song.snapshot_original()

    if not value.strip():
        song.sections = copy.deepcopy(song.original_sections)
        song.current_transpose = ""
        return song

    semitones = parse_transpose_input(value, song.original_key)
    song.sections = transpose_sections(song.original_sections, semitones)
    song.current_transpose = value.strip()
    return song
