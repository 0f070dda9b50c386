"""
Builders for the default jazz chord-function automaton.

The default topology starts from functional *primitive* states (tonic,
subdominant and dominant, each keyed by bass degree) and then layers jazz
idioms on top: ii-V tonicization, applied dominants, diminished and tritone
substitutes, sus chords, chromatic approach chords, neighbour and passing
chords. Each idiom is a named operation that rewrites the automaton through
its construction API, so topologies can be assembled from any subset:

	```python
	automaton = jzautomaton.automaton.Automaton()
	apply_operations(automaton, ["add_primitive_chords", "add_tonicization"])
	```

Operations read a snapshot of the transitions they extend, so transitions an
operation adds are not extended again by the same operation.
"""

import logging
import random
import re
import typing

import jzautomaton.automaton
import jzautomaton.graph
import jzautomaton.symbols


logger = logging.getLogger(__name__)


# Chords that can serve each function, keyed by the bass degree the state is named after.
TONIC_CHORDS: typing.Dict[str, typing.List[str]] = {
	"1": ["IM", "Im", "Ix", "Iø"],
	"b3": ["bIIIM", "bIIIm", "bIIIx", "bIIIø"],
	"3": ["IIIM", "IIIm", "IIIx", "IIIø"],
	"6": ["VIM", "VIm", "VIx", "VIø"],
}

SUBDOMINANT_CHORDS: typing.Dict[str, typing.List[str]] = {
	"2": ["IIM", "IIm", "IIx", "IIø"],
	"4": ["IVM", "IVm", "IVx", "IVø"],
	"b6": ["bVIM", "bVIm", "bVIx", "bVIø"],
	"6": ["VIM", "VIm", "VIx", "VIø"],
}

DOMINANT_CHORDS: typing.Dict[str, typing.List[str]] = {
	"3": ["IIIm", "IIIx"],
	"5": ["Vx"],
	"b7": ["bVIIx"],
}

# Dominant-quality transitions into these states already have their tritone substitute as a functional chord.
TRITONE_SUBSTITUTE_EXCLUSIONS = frozenset([
	"Tonic b3", "Tonic 6",
	"Subdominant 2", "Subdominant b6",
	"Dominant 3", "Dominant b7",
])

# (first, passing, arrival, function): diatonic stepwise approaches within one function.
PASSING_SEQUENCES: typing.List[typing.Tuple[str, str, str, str]] = [
	("IM", "IIm", "IIIm", "Tonic"),
	("IIm", "IIIm", "IVM", "Subdominant"),
	("IIIm", "IVM", "Vx", "Dominant"),
	("IVM", "Vx", "VIm", "Subdominant"),
	("Vx", "VIm", "VIIø", "Dominant"),
	("VIm", "VIIø", "IM", "Tonic"),
]

_FUNCTIONAL_STATE = re.compile(r"^(Tonic|Subdominant|Dominant)")
_APPLIED_DOMINANT_STATE = re.compile(r"^V / ")

Operation = typing.Callable[[jzautomaton.automaton.Automaton], None]


def all_symbols_with_qualities (qualities: typing.Iterable[str]) -> typing.List[jzautomaton.symbols.Symbol]:

	"""Return a symbol for every chromatic degree in each of the given qualities, degree by degree."""

	qualities = list(qualities)

	return [
		jzautomaton.symbols.Symbol(numeral, quality)
		for numeral in jzautomaton.symbols.NUMERALS
		for quality in qualities
	]


def _add_functional_states (
	automaton: jzautomaton.automaton.Automaton,
	function: str,
	chords: typing.Dict[str, typing.List[str]]
) -> typing.List[typing.Tuple[jzautomaton.graph.State, typing.List[str]]]:

	return [
		(automaton.add_state(f"{function} {bass}", is_start=True, is_end=True), symbols)
		for bass, symbols in chords.items()
	]


def _connect_functional_states (
	sources: typing.List[typing.Tuple[jzautomaton.graph.State, typing.List[str]]],
	targets: typing.List[typing.Tuple[jzautomaton.graph.State, typing.List[str]]]
) -> None:

	for source, _ in sources:
		for target, symbols in targets:
			for symbol in symbols:
				source.add_transition(symbol, target)


def add_primitive_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Add the functional states and the tonic -> subdominant -> dominant -> tonic cycle between them.

	Each function may also prolong itself (tonic to tonic and so on).
	"""

	tonic = _add_functional_states(automaton, "Tonic", TONIC_CHORDS)
	subdominant = _add_functional_states(automaton, "Subdominant", SUBDOMINANT_CHORDS)
	dominant = _add_functional_states(automaton, "Dominant", DOMINANT_CHORDS)

	_connect_functional_states(tonic, tonic)
	_connect_functional_states(tonic, subdominant)
	_connect_functional_states(subdominant, subdominant)
	_connect_functional_states(subdominant, dominant)
	_connect_functional_states(dominant, dominant)
	_connect_functional_states(dominant, tonic)


def add_tonicization (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Let major, minor and half-diminished chords (other than on I) be tonicized by their own ii-V."""

	home = {jzautomaton.symbols.Symbol("I", quality) for quality in ("M", "m", "ø")}

	targets = [
		t for quality in ("M", "m", "ø")
		for t in automaton.get_transitions_by_quality(quality)
		if t.symbol not in home
	]

	for t in targets:
		v_state = automaton.get_state_with_name_and_transition(f"V / {t.symbol}", t.target)
		ii_state = automaton.get_state_with_name_and_transition(f"ii / {t.symbol}", v_state, is_start=True)

		for quality in ("m", "ø", "x"):
			t.source.add_transition(t.symbol.transpose("M2").with_quality(quality), ii_state)

		ii_state.add_transition(t.symbol.transpose("P5").with_quality("x"), v_state)
		v_state.add_transition(t.symbol, t.target)


def add_applied_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Let major and minor chords be approached by their own dominant."""

	targets = automaton.get_transitions_by_quality("M") + automaton.get_transitions_by_quality("m")

	for t in targets:
		v_state = automaton.get_state_with_name_and_transition(f"V / {t.symbol}", t.target, is_start=True)
		t.source.add_transition(t.symbol.transpose("P5").with_quality("x"), v_state)
		v_state.add_transition(t.symbol, t.target)


def add_chromatic_approaching_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Let major and minor chords be approached by a dominant a half step below."""

	targets = automaton.get_transitions_by_quality("M") + automaton.get_transitions_by_quality("m")

	for t in targets:
		approach_state = automaton.get_state_with_name_and_transition(f"Chromatic approaching {t.symbol}", t.target, is_start=True)
		t.source.add_transition(t.symbol.transpose("M7").with_quality("x"), approach_state)
		approach_state.add_transition(t.symbol, t.target)


def add_tritone_substitutions (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Give every dominant seventh transition a parallel tritone substitute."""

	for t in automaton.get_transitions_by_quality("x"):

		if t.target.name in TRITONE_SUBSTITUTE_EXCLUSIONS:
			continue

		automaton.add_transition(t.symbol.transpose("dim5"), t.source, t.target)


def add_diminished_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Add diminished sevenths as dominant substitutes and as half-step approaches to minor chords."""

	# viio can stand in for any chord acting as V.
	for t in automaton.get_transitions_by_quality("x"):
		automaton.add_transition(t.symbol.transpose("M3").with_quality("o"), t.source, t.target)

	for t in automaton.get_transitions_by_quality("m"):
		diminished_state = automaton.get_state_with_name_and_transition(f"Diminished approaching {t.symbol}", t.target, is_start=True)
		t.source.add_transition(t.symbol.transpose("m2").with_quality("o"), diminished_state)
		diminished_state.add_transition(t.symbol, t.target)


def add_unpacked_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Unpack dominants into ii-V and minor chords into ii-V the other way round."""

	dominant_sevenths = [
		t for t in automaton.get_transitions_by_quality("x")
		if not _APPLIED_DOMINANT_STATE.match(t.target.name)
	]

	# Skip minor chords that already resolve an elaborating ii-V.
	minor_sevenths = [
		t for t in automaton.get_transitions_by_quality("m")
		if t.source.name != f"V / {t.symbol}"
	]

	for t in dominant_sevenths:
		unpacked_state = automaton.get_state_with_name_and_transition(f"Unpacked {t.symbol}", t.target, is_start=True)
		t.source.add_transition(t.symbol.transpose_down("P4").with_quality("m"), unpacked_state)
		unpacked_state.add_transition(t.symbol, t.target)

	for t in minor_sevenths:
		unpacked_state = automaton.get_state_with_name_and_transition(f"Unpacked {t.symbol}", t.target, is_start=True)
		t.source.add_transition(t.symbol, unpacked_state)
		unpacked_state.add_transition(t.symbol.transpose("P4").with_quality("x"), t.target)


def add_sus_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Let any dominant seventh be replaced by its sus4 chord."""

	for t in automaton.get_transitions_by_quality("x"):
		automaton.add_transition(t.symbol.with_quality("s"), t.source, t.target)


def add_neighbor_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Let functional major, minor and dominant chords be decorated by any neighbouring chord.

	``X -> neighbour -> X`` is modelled with a fresh pair of states per
	decorated transition.
	"""

	candidates = all_symbols_with_qualities(["M", "m", "x"])
	neighbors = all_symbols_with_qualities(["M", "m", "x", "ø", "o", "s"])

	for candidate in candidates:
		for t in automaton.get_transitions_by_symbol(candidate):

			if not _FUNCTIONAL_STATE.match(t.target.name):
				continue

			pre_neighbor_state = automaton.add_state(f"{t.symbol} with neighbor", is_start=True)
			neighbor_state = automaton.add_state(f"Neighbor of {t.symbol}")

			t.source.add_transition(t.symbol, pre_neighbor_state)
			neighbor_state.add_transition(t.symbol, t.target)

			for neighbor in neighbors:
				pre_neighbor_state.add_transition(neighbor, neighbor_state)


def add_passing_chords (automaton: jzautomaton.automaton.Automaton) -> None:

	"""Add diatonic three-chord stepwise runs, ascending and descending, within one function."""

	sequences = list(PASSING_SEQUENCES)
	sequences += [(arrival, passing, first, function) for first, passing, arrival, function in PASSING_SEQUENCES]

	for first, passing, arrival, function in sequences:
		for t in automaton.get_transitions_by_symbol(arrival):

			if function not in t.target.name:
				continue

			pre_passing_state = automaton.add_state(f"{function} with passing chord", is_start=True)
			passing_state = automaton.add_state("Passing chord")

			t.source.add_transition(first, pre_passing_state)
			pre_passing_state.add_transition(passing, passing_state)
			passing_state.add_transition(arrival, t.target)


OPERATIONS: typing.Dict[str, Operation] = {
	"add_primitive_chords": add_primitive_chords,
	"add_tonicization": add_tonicization,
	"add_applied_chords": add_applied_chords,
	"add_diminished_chords": add_diminished_chords,
	"add_tritone_substitutions": add_tritone_substitutions,
	"add_unpacked_chords": add_unpacked_chords,
	"add_sus_chords": add_sus_chords,
	"add_chromatic_approaching_chords": add_chromatic_approaching_chords,
	"add_neighbor_chords": add_neighbor_chords,
	"add_passing_chords": add_passing_chords,
}

DEFAULT_OPERATIONS: typing.List[str] = [
	"add_primitive_chords",
	"add_tonicization",
	"add_applied_chords",
	"add_diminished_chords",
	"add_tritone_substitutions",
	"add_unpacked_chords",
	"add_sus_chords",
	"add_chromatic_approaching_chords",
	"add_neighbor_chords",
	"add_passing_chords",
]


def apply_operations (automaton: jzautomaton.automaton.Automaton, names: typing.Iterable[str]) -> None:

	"""Apply topology operations by name, in order.

	Raises:
		ValueError: If a name is not in `OPERATIONS`.
	"""

	names = list(names)
	unknown = [name for name in names if name not in OPERATIONS]

	if unknown:
		raise ValueError(f"Unknown topology operation(s): {', '.join(unknown)}. Expected names from {sorted(OPERATIONS)}")

	for name in names:
		OPERATIONS[name](automaton)
		logger.debug(f"{name}: {len(automaton.states)} states, {len(automaton.get_transitions())} transitions")


def build_default (automaton: jzautomaton.automaton.Automaton) -> None:

	apply_operations(automaton, DEFAULT_OPERATIONS)


def create_automaton (kind: str = "default", rng: typing.Optional[random.Random] = None, **automaton_options: typing.Any) -> jzautomaton.automaton.Automaton:

	"""Create an untrained automaton.

	Parameters:
		kind: ``"default"`` for the full jazz topology, ``"empty"`` for no states.
		rng: Optional seeded ``random.Random``.
		automaton_options: Further `Automaton` keyword arguments.
	"""

	if kind not in ("default", "empty"):
		raise ValueError(f"Unknown automaton kind: {kind!r}. Expected 'default' or 'empty'")

	automaton = jzautomaton.automaton.Automaton(rng=rng, **automaton_options)

	if kind == "default":
		build_default(automaton)

	return automaton
