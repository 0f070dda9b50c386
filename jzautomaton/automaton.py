"""The weighted, nondeterministic chord-function automaton.

An `Automaton` owns a list of `State` objects, each of which owns its
outgoing transitions. Reading a list of chord symbols through the automaton
is nondeterministic: the same symbol can lead to several functional states
(``VIm`` as tonic substitute or as subdominant). The automaton therefore
works with *pathways*, one layer of candidate transitions per symbol, for
training, validation and analysis.

Typical use:

	```python
	import jzautomaton.topology

	automaton = jzautomaton.topology.create_automaton()
	automaton.train_sequences([["IIm", "Vx", "IM"], ["IM", "VIm", "IIm", "Vx", "IM"]])

	automaton.validate(["IVM", "Vx", "IM"])           # True
	automaton.find_failure_point(["IM", "bIIo"])      # FailurePoint(index=1, ...)

	sequence = automaton.build_sequence("IM").add_full()
	sequence = sequence.reharmonize_at_index(1)
	```

The automaton is not safe for concurrent training; sequences only read it.
"""

import collections
import dataclasses
import logging
import random
import re
import typing

import jzautomaton.constants
import jzautomaton.errors
import jzautomaton.graph
import jzautomaton.pathways
import jzautomaton.reporting
import jzautomaton.sampling
import jzautomaton.sequence
import jzautomaton.symbols


logger = logging.getLogger(__name__)

StatePattern = typing.Union[str, typing.Pattern[str]]
SymbolList = typing.Sequence[jzautomaton.symbols.SymbolLike]


@typing.runtime_checkable
class Chart (typing.Protocol):

	"""
	Protocol for a corpus item (one song) that can be trained on.
	"""

	def symbols (self, wrap_around: bool = False) -> SymbolList:

		"""Return the song's symbols in order, optionally repeating the opening to close the form."""

		...

	def section_symbols (self, wrap_around: bool = False) -> typing.Mapping[str, SymbolList]:

		"""Return each section's symbols keyed by section name."""

		...


@typing.runtime_checkable
class Corpus (typing.Protocol):

	"""
	Protocol for a collection of charts.
	"""

	charts: typing.Iterable[Chart]


@dataclasses.dataclass
class FailurePoint:

	"""
	Where and why a symbol list was rejected by `Automaton.find_failure_point`.

	Attributes:
		symbol: The symbol at which the walk failed (``None`` for an empty list).
		symbols: The full symbol list that was checked.
		index: Position of the failing symbol.
		previous_states: States reached just before the failure. For an
			invalid end state these are the states reached at the last symbol.
		invalid_end_state: True if every symbol could be read but none of
			the final states is an end state.
	"""

	symbol: typing.Optional[jzautomaton.symbols.Symbol]
	symbols: typing.List[jzautomaton.symbols.Symbol]
	index: int
	previous_states: typing.List[jzautomaton.graph.State]
	invalid_end_state: bool


class Automaton:

	"""A weighted automaton over chord symbols."""

	def __init__ (
		self,
		rng: typing.Optional[random.Random] = None,
		max_attempts: int = jzautomaton.constants.DEFAULT_MAX_ATTEMPTS,
		max_length: int = jzautomaton.constants.DEFAULT_MAX_LENGTH
	) -> None:

		"""
		Create an empty automaton.

		Parameters:
			rng: Optional seeded ``random.Random`` used for every generation decision.
			max_attempts: Restarts allowed for a Monte-Carlo sequence construction
				before it fails with ``GenerationFailedError``.
			max_length: Transitions a single open-ended grow operation may add
				before the attempt counts as failed.
		"""

		if max_attempts < 1:
			raise ValueError("Max attempts must be at least 1")

		if max_length < 1:
			raise ValueError("Max length must be at least 1")

		self.states: typing.List[jzautomaton.graph.State] = []
		self.rng = rng or random.Random()
		self.max_attempts = max_attempts
		self.max_length = max_length


	# ------------------------------------------------------------------
	# Construction
	# ------------------------------------------------------------------

	def add_state (self, name: str, is_start: bool = False, is_end: bool = False) -> jzautomaton.graph.State:

		"""Create a state and add it to the automaton."""

		state = jzautomaton.graph.State(name, is_start, is_end)
		self.states.append(state)

		return state


	def add_transition (
		self,
		symbol: jzautomaton.symbols.SymbolLike,
		source: jzautomaton.graph.State,
		target: jzautomaton.graph.State,
		count: float = 0.0
	) -> typing.Optional[jzautomaton.graph.Transition]:

		"""
		Add a transition between two states, or return ``None`` if an equal edge exists.
		"""

		return source.add_transition(symbol, target, count)


	def get_state_with_name_and_transition (
		self,
		name: str,
		target: jzautomaton.graph.State,
		is_start: bool = False,
		is_end: bool = False
	) -> jzautomaton.graph.State:

		"""Return a state with this name that already leads to ``target``, creating one if none exists.

		Topology builders use this to share helper states (``"V / IVM"``)
		between every transition that needs them.
		"""

		return self.get_state_by_name_and_transition(name, target) or self.add_state(name, is_start, is_end)


	# ------------------------------------------------------------------
	# Queries
	# ------------------------------------------------------------------

	def get_transitions (self) -> typing.List[jzautomaton.graph.Transition]:

		"""Return every transition, state by state."""

		return [t for state in self.states for t in state.transitions]


	def get_transitions_by_symbol (self, symbol: jzautomaton.symbols.SymbolLike) -> typing.List[jzautomaton.graph.Transition]:

		return jzautomaton.graph.filter_transitions(self.get_transitions(), symbol=symbol)


	def get_transitions_by_quality (self, quality: str) -> typing.List[jzautomaton.graph.Transition]:

		return jzautomaton.graph.filter_transitions(self.get_transitions(), quality=quality)


	def get_transitions_by_params (self, **params: typing.Any) -> typing.List[jzautomaton.graph.Transition]:

		"""Return transitions matching `jzautomaton.graph.filter_transitions` keyword constraints."""

		source = params.get("source")
		pool = source.transitions if source is not None else self.get_transitions()

		return jzautomaton.graph.filter_transitions(pool, **params)


	def get_transition_by_params (self, **params: typing.Any) -> typing.Optional[jzautomaton.graph.Transition]:

		matches = self.get_transitions_by_params(**params)

		return matches[0] if matches else None


	def get_transitions_by_target (self, state: jzautomaton.graph.State) -> typing.List[jzautomaton.graph.Transition]:

		return jzautomaton.graph.filter_transitions(self.get_transitions(), target=state)


	def get_initial_transitions (self) -> typing.List[jzautomaton.graph.Transition]:

		"""Return every transition a walk may begin with."""

		return [t for t in self.get_transitions() if t.is_initial()]


	def get_states_by_name (self, name: str) -> typing.List[jzautomaton.graph.State]:

		return [state for state in self.states if state.name == name]


	def get_state_by_name (self, name: str) -> typing.Optional[jzautomaton.graph.State]:

		matches = self.get_states_by_name(name)

		return matches[0] if matches else None


	def get_states_by_regex (self, pattern: StatePattern) -> typing.List[jzautomaton.graph.State]:

		"""Return states whose name contains a match for ``pattern`` (``re.search`` semantics)."""

		regex = re.compile(pattern)

		return [state for state in self.states if regex.search(state.name)]


	def get_states_by_name_and_transition (self, name: str, target: jzautomaton.graph.State) -> typing.List[jzautomaton.graph.State]:

		"""Return states with this name that have a transition to ``target``."""

		return [
			state for state in self.get_states_by_name(name)
			if any(t.target is target for t in state.transitions)
		]


	def get_state_by_name_and_transition (self, name: str, target: jzautomaton.graph.State) -> typing.Optional[jzautomaton.graph.State]:

		matches = self.get_states_by_name_and_transition(name, target)

		return matches[0] if matches else None


	# ------------------------------------------------------------------
	# Pathways, training and validation
	# ------------------------------------------------------------------

	def get_pathways (self, symbols: SymbolList) -> typing.List[jzautomaton.pathways.Layer]:

		"""Return one layer of admissible transitions per symbol.

		Layer 0 holds the initial transitions labelled with the first symbol.
		Each later layer holds the transitions labelled with the next symbol
		that leave a state reached by the previous layer. The last layer keeps
		only transitions into end states, then dead ends are pruned backwards.
		An empty layer means the automaton cannot read the symbols.
		"""

		symbols = jzautomaton.symbols.as_symbols(symbols)

		if not symbols:
			return []

		layers = [
			jzautomaton.graph.filter_transitions(
				self.get_transitions(),
				symbol = symbols[0],
				predicate = lambda t: t.is_initial()
			)
		]

		for symbol in symbols[1:]:
			states = jzautomaton.pathways.unique(t.target for t in layers[-1])
			layers.append([t for state in states for t in state.get_transitions_by_symbol(symbol)])

		layers[-1] = [t for t in layers[-1] if t.target.is_end]

		return jzautomaton.pathways.remove_dead_ends(layers)


	def analyze (self, symbols: SymbolList) -> typing.List[typing.List[jzautomaton.graph.State]]:

		"""Return every state path that reads ``symbols``, listing the state reached after each symbol."""

		return jzautomaton.pathways.expand_paths(self.get_pathways(symbols))


	def train_sequence (self, symbols: SymbolList) -> bool:

		"""Credit the transitions that can read ``symbols``.

		At each position every admissible transition receives ``1 / n`` where
		``n`` is the number of admissible transitions at that position, so an
		ambiguous symbol splits its weight evenly between its interpretations.

		Returns:
			True if the symbols were accepted and credited, False if the
			automaton cannot read them (nothing is changed).
		"""

		layers = self.get_pathways(symbols)

		if not layers or not all(layers):
			logger.debug(f"No pathway for {' '.join(str(s) for s in jzautomaton.symbols.as_symbols(symbols))}, nothing trained")
			return False

		for layer in layers:
			credit = 1.0 / len(layer)

			for t in layer:
				t.count += credit

		return True


	def train_sequences (self, sequences: typing.Iterable[SymbolList]) -> int:

		"""Train on several symbol lists and return how many were accepted."""

		return sum(1 for symbols in sequences if self.train_sequence(symbols))


	def train_corpus_by_section (
		self,
		corpus: Corpus,
		min_section_size: int = jzautomaton.constants.DEFAULT_MIN_SECTION_SIZE,
		with_wrap_around: bool = False
	) -> int:

		"""Train on every section of every chart that has at least ``min_section_size`` symbols."""

		sections: typing.List[SymbolList] = []

		for chart in corpus.charts:
			for symbols in chart.section_symbols(with_wrap_around).values():
				if len(symbols) >= min_section_size:
					sections.append(symbols)

		accepted = self.train_sequences(sections)
		logger.info(f"Trained on {accepted} of {len(sections)} sections")

		return accepted


	def train_corpus_by_section_with_wrap_around (
		self,
		corpus: Corpus,
		min_section_size: int = jzautomaton.constants.DEFAULT_MIN_SECTION_SIZE
	) -> int:

		return self.train_corpus_by_section(corpus, min_section_size, with_wrap_around=True)


	def train_corpus_by_song (self, corpus: Corpus, with_wrap_around: bool = False) -> int:

		"""Train on each chart's full symbol list."""

		songs = [chart.symbols(with_wrap_around) for chart in corpus.charts]
		accepted = self.train_sequences(songs)
		logger.info(f"Trained on {accepted} of {len(songs)} songs")

		return accepted


	def train_corpus_by_song_with_wrap_around (self, corpus: Corpus) -> int:

		return self.train_corpus_by_song(corpus, with_wrap_around=True)


	def find_failure_point (self, symbols: SymbolList) -> typing.Optional[FailurePoint]:

		"""Return where the automaton stops being able to read ``symbols``, or ``None`` if it accepts them.

		The walk follows every reachable state at once. It fails at the first
		symbol that no reachable state can read, or at the last symbol (with
		``invalid_end_state`` set) if no final state is an end state.
		"""

		symbols = jzautomaton.symbols.as_symbols(symbols)

		if not symbols:
			return FailurePoint(symbol=None, symbols=symbols, index=0, previous_states=[], invalid_end_state=False)

		current = jzautomaton.pathways.initial_states(self.get_transitions(), symbols[0])

		if not current:
			return FailurePoint(symbol=symbols[0], symbols=symbols, index=0, previous_states=[], invalid_end_state=False)

		for i in range(1, len(symbols)):
			previous = current
			current = jzautomaton.pathways.unique(
				next_state
				for state in previous
				for next_state in state.get_next_states_by_symbol(symbols[i])
			)

			if not current:
				return FailurePoint(symbol=symbols[i], symbols=symbols, index=i, previous_states=previous, invalid_end_state=False)

		if not any(state.is_end for state in current):
			return FailurePoint(
				symbol = symbols[-1],
				symbols = symbols,
				index = len(symbols) - 1,
				previous_states = current,
				invalid_end_state = True
			)

		return None


	def validate (self, symbols: SymbolList) -> bool:

		"""Return True if the automaton accepts ``symbols``."""

		return self.find_failure_point(symbols) is None


	# ------------------------------------------------------------------
	# Generation
	# ------------------------------------------------------------------

	def build_sequence (self, start_symbol: typing.Optional[jzautomaton.symbols.SymbolLike] = None) -> "jzautomaton.sequence.Sequence":

		"""Start a new sequence.

		With no ``start_symbol`` the sequence is empty. Otherwise it holds one
		initial transition labelled ``start_symbol``, chosen by weight.

		Raises:
			GenerationFailedError: If no initial transition with that symbol has any weight.
		"""

		if start_symbol is None:
			return jzautomaton.sequence.Sequence(self)

		candidates = jzautomaton.graph.filter_transitions(
			self.get_transitions(),
			symbol = start_symbol,
			predicate = lambda t: t.is_initial()
		)

		try:
			first = jzautomaton.sampling.choose_transition(candidates, self.rng)

		except jzautomaton.errors.NoViableChoiceError as exc:
			raise jzautomaton.errors.GenerationFailedError(f"No weighted initial transition for {start_symbol}") from exc

		return jzautomaton.sequence.Sequence(self, [first])


	def _layered_search (
		self,
		first_layer: jzautomaton.pathways.Layer,
		n: int,
		end_symbol: jzautomaton.symbols.SymbolLike,
		end_state: typing.Optional[jzautomaton.graph.State]
	) -> typing.List[jzautomaton.pathways.Layer]:

		"""Build ``n`` pruned layers from ``first_layer`` to a transition labelled ``end_symbol``.

		Layers after the first only hold transitions with positive count. The
		last layer must land on ``end_state`` if given, else on an end state.
		"""

		end_symbol = jzautomaton.symbols.as_symbol(end_symbol)
		layers = [list(first_layer)]

		for _ in range(n - 1):
			states = jzautomaton.pathways.unique(t.target for t in layers[-1])
			layers.append([t for state in states for t in state.transitions if t.count > 0])

		def is_final (t: jzautomaton.graph.Transition) -> bool:

			if t.symbol != end_symbol:
				return False

			if end_state is not None:
				return t.target is end_state

			return t.target.is_end

		layers[-1] = [t for t in layers[-1] if is_final(t)]

		return jzautomaton.pathways.remove_dead_ends(layers)


	def generate_n_length_sequence (
		self,
		n: int,
		start_symbol: jzautomaton.symbols.SymbolLike,
		end_symbol: jzautomaton.symbols.SymbolLike,
		start_state: typing.Optional[jzautomaton.graph.State] = None,
		end_state: typing.Optional[jzautomaton.graph.State] = None
	) -> "jzautomaton.sequence.Sequence":

		"""Generate a sequence of exactly ``n`` transitions between two symbols.

		Parameters:
			n: Number of transitions (chords) in the result.
			start_symbol: Symbol of the first transition.
			end_symbol: Symbol of the last transition.
			start_state: If given, the first transition must land here;
				otherwise it must be an initial transition.
			end_state: If given, the last transition must land here;
				otherwise on an end state.

		Transitions with zero count are never used.

		Raises:
			ValueError: If ``n`` is less than 1.
			GenerationFailedError: If no such sequence exists.

		Example:
			```python
			automaton.generate_n_length_sequence(4, "IIm", "IIIm").get_symbols()
			```
		"""

		if n < 1:
			raise ValueError("Sequence length must be at least 1")

		def is_first (t: jzautomaton.graph.Transition) -> bool:

			if t.count <= 0:
				return False

			if start_state is not None:
				return t.target is start_state

			return t.is_initial()

		first_layer = jzautomaton.graph.filter_transitions(self.get_transitions(), symbol=start_symbol, predicate=is_first)
		layers = self._layered_search(first_layer, n, end_symbol, end_state)

		if not layers[0]:
			raise jzautomaton.errors.GenerationFailedError(f"No {n}-chord sequence from {start_symbol} to {end_symbol}")

		return jzautomaton.sequence.Sequence(self, jzautomaton.pathways.sample_path(layers, self.rng))


	def find_elaborations (self, transition: jzautomaton.graph.Transition) -> typing.List[jzautomaton.pathways.Layer]:

		"""Return layered two- and three-hop alternatives to a single transition.

		For a transition from A to B, position 0 holds edges leaving A (not
		into an end state or B), position 1 holds edges into B (not leaving an
		end state or A) together with the middle edges of three-hop paths, and
		position 2 holds the final edges of three-hop paths. Walk the layers
		forward, matching sources to targets, and stop on reaching B.
		"""

		a = transition.source
		b = transition.target

		first_hops = [t for t in a.transitions if not t.target.is_end and t.target is not b]
		last_hops = [t for t in self.get_transitions_by_target(b) if not t.source.is_end and t.source is not a]

		two_hop = jzautomaton.pathways.remove_dead_ends([first_hops, last_hops])

		midpoints = jzautomaton.pathways.unique(t.target for t in first_hops)
		last_sources = {t.source for t in last_hops}
		middle_hops = [t for state in midpoints for t in state.transitions if t.target in last_sources]

		three_hop = jzautomaton.pathways.remove_dead_ends([first_hops, middle_hops, last_hops])

		return [
			jzautomaton.pathways.unique(two_hop[0] + three_hop[0]),
			jzautomaton.pathways.unique(two_hop[1] + three_hop[1]),
			three_hop[2],
		]


	def elaborate (self, transition: jzautomaton.graph.Transition, must_elaborate: bool = False) -> typing.List[jzautomaton.graph.Transition]:

		"""Return a weighted random path with the same endpoints as ``transition``.

		Parameters:
			transition: The transition to elaborate.
			must_elaborate: If False, the transition itself competes with the
				elaborations and may be returned unchanged.

		Raises:
			NoViableChoiceError: If no candidate path has weight.
		"""

		layers = self.find_elaborations(transition)
		candidates = list(layers[0])

		if not must_elaborate:
			candidates.insert(0, transition)

		path = [jzautomaton.sampling.choose_transition(candidates, self.rng)]

		for layer in layers[1:]:

			if path[-1].target is transition.target:
				break

			step_candidates = [t for t in layer if t.source is path[-1].target]
			path.append(jzautomaton.sampling.choose_transition(step_candidates, self.rng))

		return path


	def generate_connection (
		self,
		first: jzautomaton.graph.Transition,
		second: jzautomaton.graph.Transition
	) -> "jzautomaton.sequence.Sequence":

		"""Generate transitions that lead from ``first`` to a stand-in for ``second``.

		The result starts where ``first`` ends and ends with a transition that
		has ``second``'s symbol and lands on ``second``'s target, so it can
		replace ``second`` in a sequence. Its first edge is elaborated.

		Raises:
			GenerationFailedError: If no weighted connection exists.
		"""

		layers = self._layered_search([first], 3, second.symbol, second.target)

		if not layers[0]:
			raise jzautomaton.errors.GenerationFailedError(f"Cannot connect {first} to {second}")

		middle, last = jzautomaton.pathways.sample_path(layers[1:], self.rng)
		elaboration = [middle]

		for attempt in range(1, self.max_attempts + 1):
			try:
				elaboration = self.elaborate(middle)
				break

			except jzautomaton.errors.NoViableChoiceError as exc:
				logger.debug(f"Elaborating {middle}: attempt {attempt} failed ({exc})")

		return jzautomaton.sequence.Sequence(self, elaboration + [last])


	def generate_sequence_from_start_and_length (self, first_symbol: jzautomaton.symbols.SymbolLike, length: int) -> "jzautomaton.sequence.Sequence":

		"""Generate a sequence of at least ``length`` transitions, continuing until an end state."""

		if length < 1:
			raise ValueError("Sequence length must be at least 1")

		sequence = self.build_sequence(first_symbol)

		def done (candidate: "jzautomaton.sequence.Sequence") -> bool:

			return len(candidate) >= length and candidate.last().target.is_end

		if done(sequence):
			return sequence

		return sequence.add_until(done, allow_repeats=True, max_added=length + self.max_length)


	def generate_sequence_from_start_and_end (
		self,
		first_symbol: jzautomaton.symbols.SymbolLike,
		last_symbol: jzautomaton.symbols.SymbolLike
	) -> "jzautomaton.sequence.Sequence":

		"""Generate a sequence that starts with ``first_symbol`` and ends on ``last_symbol`` in an end state."""

		last_symbol = jzautomaton.symbols.as_symbol(last_symbol)

		def done (candidate: "jzautomaton.sequence.Sequence") -> bool:

			return candidate.last().symbol == last_symbol and candidate.last().target.is_end

		return self.build_sequence(first_symbol).add_until(done, allow_repeats=True)


	def most_common_generated_sequences (
		self,
		first_symbol: jzautomaton.symbols.SymbolLike,
		last_symbol: jzautomaton.symbols.SymbolLike,
		n: int
	) -> typing.List[typing.Tuple[str, int]]:

		"""Generate ``n`` start-to-end sequences and return ``(symbols, count)`` pairs, most common first."""

		counter: typing.Counter[str] = collections.Counter()

		for _ in range(n):
			sequence = self.generate_sequence_from_start_and_end(first_symbol, last_symbol)
			counter[" ".join(str(symbol) for symbol in sequence.get_symbols())] += 1

		return counter.most_common()


	# ------------------------------------------------------------------
	# Probability reports
	# ------------------------------------------------------------------

	def get_state_probabilities_given_symbol (self, symbol: jzautomaton.symbols.SymbolLike) -> typing.Dict[str, float]:

		"""Return how likely ``symbol`` is to lead to each state name (i.e. each chord function)."""

		return jzautomaton.reporting.probability_dict(self.get_transitions_by_symbol(symbol), jzautomaton.reporting.state_key)


	def get_symbol_probabilities_given_state_regex (self, pattern: StatePattern) -> typing.Dict[str, float]:

		"""Return how likely each symbol is among transitions landing in states matching ``pattern``."""

		states = set(self.get_states_by_regex(pattern))
		transitions = [t for t in self.get_transitions() if t.target in states]

		return jzautomaton.reporting.probability_dict(transitions, jzautomaton.reporting.symbol_key)


	def get_transition_probabilities_given_state_regex (self, pattern: StatePattern, key_type: str = "transition") -> typing.Dict[str, float]:

		"""Return probabilities of transitions leaving states matching ``pattern``.

		Parameters:
			pattern: Regular expression searched in state names.
			key_type: ``"transition"`` keys by ``"symbol: state"``,
				``"symbol"`` by symbol, ``"state"`` by target state name.
		"""

		key_functions: typing.Dict[str, jzautomaton.reporting.KeyFunction] = {
			"transition": jzautomaton.reporting.transition_key,
			"symbol": jzautomaton.reporting.symbol_key,
			"state": jzautomaton.reporting.state_key,
		}

		if key_type not in key_functions:
			raise ValueError(f"Unknown key type: {key_type!r}. Expected one of {sorted(key_functions)}")

		states = set(self.get_states_by_regex(pattern))
		transitions = [t for t in self.get_transitions() if t.source in states]

		return jzautomaton.reporting.probability_dict(transitions, key_functions[key_type])
