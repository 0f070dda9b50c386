"""Render generated sequences as MIDI files.

Each chord of a sequence becomes a block chord held for a fixed number of
beats. Consecutive chords are voice-led: every inversion of the next chord
is tried and the one with the smallest total semitone movement from the
previous voicing is kept, so the progression stays in one register.

Example:
	```python
	sequence = automaton.build_sequence("IM").add_full()
	jzautomaton.rendering.sequence_to_midi(sequence, "progression.mid", key_name="Bb", bpm=100)
	```
"""

import logging
import typing

import mido

import jzautomaton.chords
import jzautomaton.constants
import jzautomaton.sequence


logger = logging.getLogger(__name__)


def invert_chord (intervals: typing.List[int], inversion: int) -> typing.List[int]:

	"""Return the given inversion of a chord, re-zeroed on its lowest note.

	Example:
		```python
		invert_chord([0, 4, 7, 10], 1)  # [0, 3, 6, 8]
		```
	"""

	n = len(intervals)

	if n == 0:
		return []

	inversion %= n
	rotated = intervals[inversion:] + [i + 12 for i in intervals[:inversion]]

	return [i - rotated[0] for i in rotated]


def voice_lead (intervals: typing.List[int], root_midi: int, previous: typing.Optional[typing.List[int]]) -> typing.List[int]:

	"""Return the voicing of a chord that moves least from ``previous``.

	Every inversion is tried with its bass in three octaves around the root.
	Root position is used for the first chord and whenever the chord sizes
	differ (a triad after a seventh chord).
	"""

	if previous is None or len(previous) != len(intervals):
		return [root_midi + i for i in intervals]

	candidates: typing.List[typing.List[int]] = []

	for inversion in range(len(intervals)):
		shape = invert_chord(intervals, inversion)
		bass = root_midi + intervals[inversion]

		for octave in (-12, 0, 12):
			candidates.append([bass + octave + i for i in shape])

	return min(candidates, key=lambda voicing: sum(abs(a - b) for a, b in zip(voicing, previous)))


def chord_voicings (chords: typing.Iterable[jzautomaton.chords.Chord], root_midi: int) -> typing.List[typing.List[int]]:

	"""Voice-lead a list of chords around ``root_midi``."""

	voicings: typing.List[typing.List[int]] = []
	previous: typing.Optional[typing.List[int]] = None

	for chord in chords:
		chord_root = chord.tones(root_midi)[0]
		previous = voice_lead(chord.intervals(), chord_root, previous)
		voicings.append(previous)

	return voicings


def sequence_to_midi (
	sequence: jzautomaton.sequence.Sequence,
	filename: typing.Optional[str],
	key_name: str = jzautomaton.constants.DEFAULT_KEY,
	bpm: float = jzautomaton.constants.DEFAULT_BPM,
	beats_per_chord: int = jzautomaton.constants.DEFAULT_BEATS_PER_CHORD,
	root_midi: int = jzautomaton.constants.DEFAULT_ROOT_MIDI,
	velocity: int = jzautomaton.constants.DEFAULT_VELOCITY,
	collapse: bool = True
) -> mido.MidiFile:

	"""Write a sequence's chords to a single-track MIDI file.

	Parameters:
		sequence: The sequence to render.
		filename: Output path. ``None`` builds the file without saving it.
		key_name: Key the symbols are realised in (e.g. ``"Eb"``).
		bpm: Tempo.
		beats_per_chord: How long each chord is held.
		root_midi: MIDI note the chord roots are placed near.
		velocity: Note-on velocity.
		collapse: Merge consecutive repeated symbols into one longer chord.

	Returns:
		The `mido.MidiFile` that was written.
	"""

	if beats_per_chord < 1:
		raise ValueError("Beats per chord must be at least 1")

	if not 1 <= velocity <= 127:
		raise ValueError("Velocity must be between 1 and 127")

	symbols = sequence.get_symbols_collapsed() if collapse else sequence.get_symbols()
	chords = [symbol.to_chord(key_name) for symbol in symbols]

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = jzautomaton.constants.TICKS_PER_BEAT

	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm), time=0))
	track.append(mido.MetaMessage("track_name", name=" ".join(str(s) for s in symbols), time=0))

	duration = beats_per_chord * jzautomaton.constants.TICKS_PER_BEAT

	for voicing in chord_voicings(chords, root_midi):

		for note in voicing:
			track.append(mido.Message("note_on", note=note, velocity=velocity, time=0))

		# Only the first note off carries the delta; the rest release together.
		for i, note in enumerate(voicing):
			track.append(mido.Message("note_off", note=note, velocity=0, time=duration if i == 0 else 0))

	track.append(mido.MetaMessage("end_of_track", time=0))

	if filename is not None:
		mid.save(filename)
		logger.info(f"Saved {len(chords)} chords to {filename}")

	return mid
