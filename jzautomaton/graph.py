"""States and transitions, the building blocks of the automaton.

A `State` owns its outgoing `Transition` objects. Transitions point at their
target state without owning it; all states belong to one
`jzautomaton.automaton.Automaton`. States and transitions are compared by
identity, so two states may share a name.
"""

import random
import typing

import jzautomaton.sampling
import jzautomaton.symbols


class Transition:

	"""
	A directed, symbol-labelled, weighted edge between two states.
	"""

	def __init__ (self, source: "State", target: "State", symbol: jzautomaton.symbols.SymbolLike, count: float = 0.0) -> None:

		"""
		Create a transition. Use `State.add_transition` rather than calling this directly.
		"""

		if count < 0:
			raise ValueError("Transition count cannot be negative")

		self.source = source
		self.target = target
		self.symbol = jzautomaton.symbols.as_symbol(symbol)
		self.count = float(count)


	def get_probability (self) -> float:

		"""
		Return this transition's share of its source state's outgoing weight.
		"""

		total = self.source.get_total_count()

		if total <= 0:
			return 0.0

		return self.count / total


	def is_initial (self) -> bool:

		"""Return True if a walk may begin with this transition.

		A walk begins by landing in a start state. A start state that no
		transition leads into is a pure entry point, so leaving it also
		begins a walk.
		"""

		return self.target.is_start or (self.source.is_start and self.source.incoming == 0)


	def __str__ (self) -> str:

		return f"{self.source.name} =[{self.symbol}]=> {self.target.name}"


	def __repr__ (self) -> str:

		return f"<Transition {self} count={self.count:g}>"


def filter_transitions (
	transitions: typing.Iterable[Transition],
	source: typing.Optional["State"] = None,
	target: typing.Optional["State"] = None,
	symbol: typing.Optional[jzautomaton.symbols.SymbolLike] = None,
	quality: typing.Optional[str] = None,
	source_is_end: typing.Optional[bool] = None,
	target_is_start: typing.Optional[bool] = None,
	target_is_end: typing.Optional[bool] = None,
	predicate: typing.Optional[typing.Callable[[Transition], bool]] = None
) -> typing.List[Transition]:

	"""Return the transitions matching every given constraint.

	Constraints left as ``None`` are ignored. States are matched by identity.

	Parameters:
		transitions: Transitions to filter, in order.
		source: Required source state.
		target: Required target state.
		symbol: Required symbol (string or Symbol).
		quality: Required symbol quality code (e.g. ``"x"``).
		source_is_end: Required ``is_end`` flag of the source state.
		target_is_start: Required ``is_start`` flag of the target state.
		target_is_end: Required ``is_end`` flag of the target state.
		predicate: Any further test.
	"""

	wanted_symbol = jzautomaton.symbols.as_symbol(symbol) if symbol is not None else None
	result: typing.List[Transition] = []

	for t in transitions:

		if source is not None and t.source is not source:
			continue

		if target is not None and t.target is not target:
			continue

		if wanted_symbol is not None and t.symbol != wanted_symbol:
			continue

		if quality is not None and t.symbol.quality != quality:
			continue

		if source_is_end is not None and t.source.is_end != source_is_end:
			continue

		if target_is_start is not None and t.target.is_start != target_is_start:
			continue

		if target_is_end is not None and t.target.is_end != target_is_end:
			continue

		if predicate is not None and not predicate(t):
			continue

		result.append(t)

	return result


class State:

	"""
	A named node of the automaton, flagged as a valid walk start and/or end.
	"""

	def __init__ (self, name: str, is_start: bool = False, is_end: bool = False) -> None:

		self.name = name
		self.is_start = bool(is_start)
		self.is_end = bool(is_end)
		self.transitions: typing.List[Transition] = []
		self.incoming = 0


	def add_transition (self, symbol: jzautomaton.symbols.SymbolLike, target: "State", count: float = 0.0) -> typing.Optional[Transition]:

		"""
		Add an outgoing transition unless an equal ``(symbol, target)`` edge already exists.

		Returns the new transition, or ``None`` for a duplicate.
		"""

		symbol = jzautomaton.symbols.as_symbol(symbol)

		if self.has_transition(symbol, target):
			return None

		transition = Transition(self, target, symbol, count)
		self.transitions.append(transition)
		target.incoming += 1

		return transition


	def has_transition (self, symbol: jzautomaton.symbols.SymbolLike, target: "State") -> bool:

		"""Return True if an edge with this symbol already leads to ``target``."""

		symbol = jzautomaton.symbols.as_symbol(symbol)

		return any(t.symbol == symbol and t.target is target for t in self.transitions)


	def get_transitions_by_params (self, **params: typing.Any) -> typing.List[Transition]:

		"""Return outgoing transitions matching `filter_transitions` keyword constraints."""

		return filter_transitions(self.transitions, **params)


	def get_transition_by_params (self, **params: typing.Any) -> typing.Optional[Transition]:

		"""Return the first outgoing transition matching the constraints, or ``None``."""

		matches = self.get_transitions_by_params(**params)

		return matches[0] if matches else None


	def get_transitions_by_symbol (self, symbol: jzautomaton.symbols.SymbolLike) -> typing.List[Transition]:

		return filter_transitions(self.transitions, symbol=symbol)


	def get_next_states (self) -> typing.List["State"]:

		return [t.target for t in self.transitions]


	def get_next_states_by_symbol (self, symbol: jzautomaton.symbols.SymbolLike) -> typing.List["State"]:

		return [t.target for t in self.get_transitions_by_symbol(symbol)]


	def get_total_count (self) -> float:

		"""Return the summed count of every outgoing transition."""

		return jzautomaton.sampling.total_count(self.transitions)


	def get_transitions_with_probabilities (self) -> typing.List[typing.Tuple[Transition, float]]:

		return jzautomaton.sampling.transitions_with_probabilities(self.transitions)


	def choose_transition (self, rng: typing.Optional[random.Random] = None) -> Transition:

		"""Choose an outgoing transition weighted by count."""

		return jzautomaton.sampling.choose_transition(self.transitions, rng)


	def __str__ (self) -> str:

		return self.name


	def __repr__ (self) -> str:

		flags = ("start " if self.is_start else "") + ("end" if self.is_end else "")

		return f"<State {self.name!r} {flags.strip()}>".replace(" >", ">")
