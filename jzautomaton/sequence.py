"""Immutable chord sequences built by walking an automaton.

A `Sequence` is a chain of transitions in which each transition starts where
the previous one ends. Every editing method returns a new `Sequence`; the
receiver is never changed, so a sequence can be kept as a checkpoint while
variations are explored.

Generation decisions use the owning automaton's ``rng``. Operations that
walk an open-ended number of steps restart from the receiver when the walk
gets stuck, up to the automaton's ``max_attempts``.
"""

import logging
import typing

import jzautomaton.automaton
import jzautomaton.chords
import jzautomaton.errors
import jzautomaton.graph
import jzautomaton.sampling
import jzautomaton.symbols


logger = logging.getLogger(__name__)


def _ensure_connected (transitions: typing.Sequence[jzautomaton.graph.Transition]) -> None:

	for i in range(1, len(transitions)):

		if transitions[i].source is not transitions[i - 1].target:
			raise jzautomaton.errors.InvalidSequenceError(
				f"Transition {i} ({transitions[i]}) does not start where transition {i - 1} ({transitions[i - 1]}) ends"
			)


class Sequence:

	"""A contiguous walk through an automaton."""

	def __init__ (
		self,
		automaton: "jzautomaton.automaton.Automaton",
		transitions: typing.Optional[typing.Iterable[jzautomaton.graph.Transition]] = None
	) -> None:

		"""
		Create a sequence.

		Raises:
			InvalidSequenceError: If a transition does not start at the previous transition's target.
		"""

		self.automaton = automaton
		self.transitions: typing.Tuple[jzautomaton.graph.Transition, ...] = tuple(transitions or ())

		_ensure_connected(self.transitions)


	def _derive (self, transitions: typing.Iterable[jzautomaton.graph.Transition]) -> "Sequence":

		return Sequence(self.automaton, transitions)


	# ------------------------------------------------------------------
	# Reading
	# ------------------------------------------------------------------

	def first (self) -> typing.Optional[jzautomaton.graph.Transition]:

		return self.transitions[0] if self.transitions else None


	def last (self) -> typing.Optional[jzautomaton.graph.Transition]:

		return self.transitions[-1] if self.transitions else None


	def index (self, n: int) -> jzautomaton.graph.Transition:

		return self.transitions[n]


	def __getitem__ (self, n: int) -> jzautomaton.graph.Transition:

		return self.transitions[n]


	def __len__ (self) -> int:

		return len(self.transitions)


	def __iter__ (self) -> typing.Iterator[jzautomaton.graph.Transition]:

		return iter(self.transitions)


	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, Sequence):
			return NotImplemented

		return (
			self.automaton is other.automaton
			and len(self.transitions) == len(other.transitions)
			and all(a is b for a, b in zip(self.transitions, other.transitions))
		)


	__hash__ = None  # type: ignore[assignment]


	def get_symbols (self) -> typing.List[jzautomaton.symbols.Symbol]:

		return [t.symbol for t in self.transitions]


	def get_chords (self, key_name: str) -> typing.List[jzautomaton.chords.Chord]:

		"""Return the sequence's chords in the given key."""

		return [symbol.to_chord(key_name) for symbol in self.get_symbols()]


	def get_states (self) -> typing.List[jzautomaton.graph.State]:

		"""Return the state reached after each transition."""

		return [t.target for t in self.transitions]


	def get_symbol_state_strings (self) -> typing.List[str]:

		return [f"{t.symbol}: {t.target.name}" for t in self.transitions]


	def get_symbols_collapsed (self) -> typing.List[jzautomaton.symbols.Symbol]:

		"""Return the symbols with consecutive repeats merged."""

		collapsed: typing.List[jzautomaton.symbols.Symbol] = []

		for symbol in self.get_symbols():
			if not collapsed or collapsed[-1] != symbol:
				collapsed.append(symbol)

		return collapsed


	def get_chords_collapsed (self, key_name: str) -> typing.List[jzautomaton.chords.Chord]:

		return [symbol.to_chord(key_name) for symbol in self.get_symbols_collapsed()]


	def describe (self, key_name: typing.Optional[str] = None) -> str:

		"""Return a printable summary: each symbol with its state, then the chord names in ``key_name``."""

		lines = [" | ".join(self.get_symbol_state_strings())]

		if key_name is not None:
			lines.append(", ".join(chord.name() for chord in self.get_chords_collapsed(key_name)))

		return "\n".join(lines)


	def __str__ (self) -> str:

		return " | ".join(self.get_symbol_state_strings())


	def __repr__ (self) -> str:

		return f"<Sequence {' '.join(str(s) for s in self.get_symbols())}>"


	# ------------------------------------------------------------------
	# Growing
	# ------------------------------------------------------------------

	def _retry (self, build: typing.Callable[[], typing.Optional["Sequence"]], description: str) -> "Sequence":

		"""Run ``build`` until it returns a sequence, restarting on a stuck walk."""

		last_error: typing.Optional[Exception] = None

		for attempt in range(1, self.automaton.max_attempts + 1):

			try:
				result = build()

			except jzautomaton.errors.NoViableChoiceError as exc:
				last_error = exc
				logger.debug(f"{description}: attempt {attempt} got stuck ({exc})")
				continue

			if result is not None:
				return result

			logger.debug(f"{description}: attempt {attempt} ran past {self.automaton.max_length} transitions")

		raise jzautomaton.errors.GenerationFailedError(
			f"Could not {description} after {self.automaton.max_attempts} attempts"
		) from last_error


	def _add_excluding (self, exclude: typing.Sequence[jzautomaton.symbols.Symbol]) -> "Sequence":

		if self.transitions:
			candidates = self.transitions[-1].target.transitions
		else:
			candidates = self.automaton.get_initial_transitions()

		candidates = [t for t in candidates if t.symbol not in exclude]
		chosen = jzautomaton.sampling.choose_transition(candidates, self.automaton.rng)

		return self._derive(self.transitions + (chosen,))


	def add (self, allow_repeats: bool = False) -> "Sequence":

		"""Append one weighted random transition.

		An empty sequence starts with an initial transition. Unless
		``allow_repeats`` is set, the new symbol differs from the last one.

		Raises:
			NoViableChoiceError: If no candidate has weight.
		"""

		exclude = [] if allow_repeats or not self.transitions else [self.transitions[-1].symbol]

		return self._add_excluding(exclude)


	def add_n (self, n: int, allow_repeats: bool = False) -> "Sequence":

		"""Append ``n`` transitions one at a time."""

		if n < 0:
			raise ValueError("Cannot add a negative number of transitions")

		sequence = self

		for _ in range(n):
			sequence = sequence.add(allow_repeats)

		return sequence


	def add_until (
		self,
		stop: typing.Callable[["Sequence"], bool],
		allow_repeats: bool = False,
		max_added: typing.Optional[int] = None
	) -> "Sequence":

		"""Append transitions until ``stop`` returns True for the grown sequence.

		At least one transition is always added. A walk that gets stuck or
		adds more than ``max_added`` transitions (default: the automaton's
		``max_length``) is restarted from this sequence.

		Raises:
			GenerationFailedError: If every attempt fails.
		"""

		limit = max_added if max_added is not None else self.automaton.max_length

		def build () -> typing.Optional["Sequence"]:

			sequence = self

			for _ in range(limit):
				sequence = sequence.add(allow_repeats)

				if stop(sequence):
					return sequence

			return None

		return self._retry(build, "extend sequence")


	def add_full (self, allow_repeats: bool = False) -> "Sequence":

		"""Append transitions until one lands on an end state."""

		return self.add_until(lambda sequence: sequence.transitions[-1].target.is_end, allow_repeats)


	def add_until_symbol (self, symbol: jzautomaton.symbols.SymbolLike, allow_repeats: bool = False) -> "Sequence":

		"""Append transitions until one is labelled ``symbol``."""

		symbol = jzautomaton.symbols.as_symbol(symbol)

		return self.add_until(lambda sequence: sequence.transitions[-1].symbol == symbol, allow_repeats)


	def prepend_full (self, allow_repeats: bool = False) -> "Sequence":

		"""Grow the sequence backwards until it begins with an initial transition.

		The first transition is first re-drawn among every transition with the
		same symbol and target, then transitions into its source are prepended
		one at a time. At least one transition is always prepended.

		Raises:
			ValueError: If the sequence is empty.
			GenerationFailedError: If every attempt fails.
		"""

		if not self.transitions:
			raise ValueError("Cannot prepend to an empty sequence")

		first = self.transitions[0]
		rng = self.automaton.rng

		def build () -> typing.Optional["Sequence"]:

			alternatives = self.automaton.get_transitions_by_params(symbol=first.symbol, target=first.target)
			transitions = [jzautomaton.sampling.choose_transition(alternatives, rng)] + list(self.transitions[1:])

			for _ in range(self.automaton.max_length):
				earliest = transitions[0]
				candidates = self.automaton.get_transitions_by_target(earliest.source)

				if not allow_repeats:
					candidates = [t for t in candidates if t.symbol != earliest.symbol]

				transitions.insert(0, jzautomaton.sampling.choose_transition(candidates, rng))

				if transitions[0].is_initial():
					return self._derive(transitions)

			return None

		return self._retry(build, "prepend to sequence")


	# ------------------------------------------------------------------
	# Editing
	# ------------------------------------------------------------------

	def remove (self) -> "Sequence":

		return self.remove_n(1)


	def remove_n (self, n: int) -> "Sequence":

		"""Drop the last ``n`` transitions.

		Raises:
			ValueError: Unless ``0 <= n < len(self)``.
		"""

		if n < 0 or n >= len(self.transitions):
			raise ValueError(f"Cannot remove {n} transitions from a sequence of {len(self.transitions)}")

		return self._derive(self.transitions[:len(self.transitions) - n])


	def change_last (self, allow_repeats: bool = False) -> "Sequence":

		"""Replace the last transition with one labelled by a different symbol.

		Raises:
			ValueError: If the sequence is empty.
			NoViableChoiceError: If no other symbol can follow.
		"""

		if not self.transitions:
			raise ValueError("Cannot change the last transition of an empty sequence")

		removed = self.transitions[-1]
		base = self._derive(self.transitions[:-1])
		exclude = [removed.symbol]

		if not allow_repeats and base.transitions:
			exclude.append(base.transitions[-1].symbol)

		return base._add_excluding(exclude)


	def reharmonize_at_index (self, index: int, allow_repeats: bool = False, keep_anchors: bool = False) -> "Sequence":

		"""Regenerate the phrase that contains ``index``.

		A phrase is bounded by end states: it starts at the nearest transition
		at or before ``index`` that leaves an end state (or the start of the
		sequence) and runs to the nearest transition at or after ``index``
		that lands on one (or the end of the sequence).

		- Whole sequence with ``keep_anchors``: regenerate with the same
		  length, first and last symbols, and first and last states.
		- Last phrase: truncate and `add_full`.
		- First phrase: drop it and `prepend_full` onto the remainder.
		- Otherwise: replace the phrase and the transition after it with a
		  connection from the transition before it.

		Raises:
			IndexError: If ``index`` is out of range.
			GenerationFailedError: If the phrase cannot be regenerated.
		"""

		length = len(self.transitions)

		if index < 0 or index >= length:
			raise IndexError(f"Index {index} out of range for a sequence of {length}")

		start = index
		while start > 0 and not self.transitions[start].source.is_end:
			start -= 1

		end = index
		while end < length - 1 and not self.transitions[end].target.is_end:
			end += 1

		if keep_anchors and start == 0 and end == length - 1:
			first = self.transitions[0]
			last = self.transitions[-1]

			return self.automaton.generate_n_length_sequence(
				length,
				first.symbol,
				last.symbol,
				start_state = first.target,
				end_state = last.target
			)

		if end == length - 1:
			return self._derive(self.transitions[:start]).add_full(allow_repeats)

		if start == 0:
			return self._derive(self.transitions[end + 1:]).prepend_full(allow_repeats)

		connection = self.automaton.generate_connection(self.transitions[start - 1], self.transitions[end + 1])
		result = self._derive(self.transitions[:start] + connection.transitions + self.transitions[end + 2:])

		return result if allow_repeats else result.make_unique()


	def splice (self, index: int) -> "Sequence":

		"""Remove the transition at ``index`` while keeping the sequence connected.

		The first and last transitions are simply dropped. An inner transition
		is merged with the one after it, using an edge from its source with the
		next transition's symbol and target. Without such an edge the
		sequence is returned unchanged.

		Raises:
			IndexError: If ``index`` is out of range.
		"""

		length = len(self.transitions)

		if index < 0 or index >= length:
			raise IndexError(f"Index {index} out of range for a sequence of {length}")

		if index == 0 or index == length - 1:
			return self._derive(self.transitions[:index] + self.transitions[index + 1:])

		current = self.transitions[index]
		following = self.transitions[index + 1]

		replacement = current.source.get_transition_by_params(symbol=following.symbol, target=following.target)

		if replacement is None:
			return self

		return self._derive(self.transitions[:index] + (replacement,) + self.transitions[index + 2:])


	def make_unique (self) -> "Sequence":

		"""Splice away adjacent repeated symbols wherever an edge allows it."""

		sequence = self
		i = 0

		while i < len(sequence):
			symbol = sequence.transitions[i].symbol

			repeated = (
				(i > 0 and sequence.transitions[i - 1].symbol == symbol)
				or (i < len(sequence) - 1 and sequence.transitions[i + 1].symbol == symbol)
			)

			if repeated:
				spliced = sequence.splice(i)

				if spliced is not sequence:
					sequence = spliced
					i = max(i - 1, 0)
					continue

			i += 1

		return sequence
