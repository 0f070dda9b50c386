"""Key-relative chord symbols (Mehegan-style Roman numerals).

A `Symbol` names a chord by its scale degree relative to the tonic and a
one-character quality code, e.g. ``IIm`` (ii7), ``Vx`` (V7), ``bVIIx``,
``VIIø``. The automaton only compares, classifies and transposes symbols;
`to_chord()` turns one into a concrete `Chord` once a key is chosen.

Quality codes:
- ``M``: major seventh
- ``m``: minor seventh
- ``x``: dominant seventh
- ``ø``: half diminished (``h`` is accepted when parsing)
- ``o``: diminished seventh
- ``s``: dominant seventh sus4
- ``+``: augmented

Example:
	```python
	ii = Symbol.parse("ii")          # IIm
	v = ii.transpose("P4").with_quality("x")   # Vx
	v.to_chord("Bb").name()          # "F7"
	```
"""

import dataclasses
import re
import typing

import jzautomaton.chords


NUMERALS: typing.List[str] = ["I", "bII", "II", "bIII", "III", "IV", "bV", "V", "bVI", "VI", "bVII", "VII"]

ROMAN_DEGREES: typing.Dict[str, int] = {
	"I": 0,
	"II": 2,
	"III": 4,
	"IV": 5,
	"V": 7,
	"VI": 9,
	"VII": 11,
}

# Seventh-chord quality of each degree of the major scale.
DIATONIC_QUALITIES: typing.Dict[int, str] = {
	0: "M",
	2: "m",
	4: "m",
	5: "M",
	7: "x",
	9: "m",
	11: "ø",
}

QUALITY_TO_CHORD_QUALITY: typing.Dict[str, str] = {
	"M": "major_7th",
	"m": "minor_7th",
	"x": "dominant_7th",
	"ø": "half_diminished_7th",
	"o": "diminished_7th",
	"s": "dominant_7th_sus4",
	"+": "augmented",
}

QUALITY_ALIASES: typing.Dict[str, str] = {
	"h": "ø",
}

INTERVAL_SEMITONES: typing.Dict[str, int] = {
	"P1": 0,
	"m2": 1,
	"M2": 2,
	"m3": 3,
	"M3": 4,
	"P4": 5,
	"aug4": 6,
	"dim5": 6,
	"P5": 7,
	"m6": 8,
	"M6": 9,
	"m7": 10,
	"M7": 11,
	"P8": 0,
}

_SYMBOL_PATTERN = re.compile(r"^(b|#)?(VII|VI|IV|V|III|II|I|vii|vi|iv|v|iii|ii|i)(M|m|x|ø|h|o|s|\+)?$")
_NUMERAL_PATTERN = re.compile(r"^(b|#)?(VII|VI|IV|V|III|II|I|vii|vi|iv|v|iii|ii|i)$")


def numeral_to_degree (numeral: str) -> int:

	"""Return the chromatic scale degree (0-11) of a Roman numeral such as ``"bVI"``."""

	match = _NUMERAL_PATTERN.match(numeral)

	if match is None:
		raise ValueError(f"Unknown numeral: {numeral!r}")

	accidental, roman = match.groups()
	degree = ROMAN_DEGREES[roman.upper()]

	if accidental == "b":
		degree -= 1

	elif accidental == "#":
		degree += 1

	return degree % 12


@dataclasses.dataclass(frozen=True)
class Symbol:

	"""
	A chord named by scale degree and quality, independent of key.

	The numeral is stored in its canonical flat spelling, so ``#IV`` and
	``bV`` compare equal.
	"""

	numeral: str
	quality: str = "M"

	def __post_init__ (self) -> None:

		quality = QUALITY_ALIASES.get(self.quality, self.quality)

		if quality not in QUALITY_TO_CHORD_QUALITY:
			raise ValueError(f"Unknown symbol quality: {self.quality!r}")

		object.__setattr__(self, "numeral", NUMERALS[numeral_to_degree(self.numeral)])
		object.__setattr__(self, "quality", quality)


	@classmethod
	def parse (cls, text: str) -> "Symbol":

		"""Parse a symbol string such as ``"IIm"``, ``"bVIIx"`` or ``"vi"``.

		When the quality is omitted, diatonic degrees take their diatonic
		seventh quality (``V`` is ``Vx``, ``ii`` is ``IIm``). Other degrees
		default to ``M`` in upper case and ``m`` in lower case.

		Raises:
			ValueError: If the text is not a valid symbol.
		"""

		match = _SYMBOL_PATTERN.match(text.strip())

		if match is None:
			raise ValueError(f"Cannot parse symbol: {text!r}")

		accidental, roman, quality = match.groups()
		numeral = (accidental or "") + roman

		if quality is None:
			degree = numeral_to_degree(numeral)

			if accidental is None and degree in DIATONIC_QUALITIES:
				quality = DIATONIC_QUALITIES[degree]

			else:
				quality = "M" if roman.isupper() else "m"

		return cls(numeral=numeral, quality=quality)


	@property
	def degree (self) -> int:

		"""Semitones above the tonic."""

		return NUMERALS.index(self.numeral)


	def transpose (self, interval: str) -> "Symbol":

		"""Return this symbol moved up by a named interval (e.g. ``"P5"``), keeping its quality."""

		if interval not in INTERVAL_SEMITONES:
			raise ValueError(f"Unknown interval: {interval!r}")

		return Symbol(numeral=NUMERALS[(self.degree + INTERVAL_SEMITONES[interval]) % 12], quality=self.quality)


	def transpose_down (self, interval: str) -> "Symbol":

		"""Return this symbol moved down by a named interval."""

		if interval not in INTERVAL_SEMITONES:
			raise ValueError(f"Unknown interval: {interval!r}")

		return Symbol(numeral=NUMERALS[(self.degree - INTERVAL_SEMITONES[interval]) % 12], quality=self.quality)


	def with_quality (self, quality: str) -> "Symbol":

		"""Return a symbol on the same degree with a different quality."""

		return Symbol(numeral=self.numeral, quality=quality)


	def to_chord (self, key_name: str) -> jzautomaton.chords.Chord:

		"""Render this symbol as a concrete chord in the given key."""

		key_pc = jzautomaton.chords.key_name_to_pc(key_name)

		return jzautomaton.chords.Chord(
			root_pc = (key_pc + self.degree) % 12,
			quality = QUALITY_TO_CHORD_QUALITY[self.quality]
		)


	def __str__ (self) -> str:

		return f"{self.numeral}{self.quality}"


SymbolLike = typing.Union[Symbol, str]


def as_symbol (value: SymbolLike) -> Symbol:

	"""Coerce a string or Symbol into a Symbol."""

	if isinstance(value, Symbol):
		return value

	if isinstance(value, str):
		return Symbol.parse(value)

	raise TypeError(f"Expected a Symbol or string, got {type(value).__name__}")


def as_symbols (values: typing.Iterable[SymbolLike]) -> typing.List[Symbol]:

	"""Coerce every item of an iterable into a Symbol."""

	return [as_symbol(value) for value in values]
