"""Layered pathway helpers shared by training, validation and generation.

A *layer* is the list of transitions that are structurally possible at one
position of a walk. Concrete walks are recovered from a list of layers by
matching each transition's target with a transition's source in the next
layer.
"""

import random
import typing

import jzautomaton.graph
import jzautomaton.sampling
import jzautomaton.symbols


Layer = typing.List[jzautomaton.graph.Transition]

T = typing.TypeVar("T")


def unique (items: typing.Iterable[T]) -> typing.List[T]:

	"""
	Drop repeated items, keeping the first occurrence of each.
	"""

	return list(dict.fromkeys(items))


def initial_states (transitions: typing.Iterable[jzautomaton.graph.Transition], symbol: jzautomaton.symbols.SymbolLike) -> typing.List[jzautomaton.graph.State]:

	"""
	Return the states a walk can be in after reading ``symbol`` first.
	"""

	matches = jzautomaton.graph.filter_transitions(transitions, symbol=symbol, predicate=lambda t: t.is_initial())

	return unique(t.target for t in matches)


def remove_dead_ends (layers: typing.Sequence[Layer]) -> typing.List[Layer]:

	"""Prune transitions that cannot continue into the next layer.

	Works backwards from the last layer, so an empty layer empties every layer
	before it. Returns new lists; the input is not modified.
	"""

	pruned = [list(layer) for layer in layers]

	for i in range(len(pruned) - 2, -1, -1):
		next_sources = {t.source for t in pruned[i + 1]}
		pruned[i] = [t for t in pruned[i] if t.target in next_sources]

	return pruned


def expand_paths (layers: typing.Sequence[Layer]) -> typing.List[typing.List[jzautomaton.graph.State]]:

	"""Enumerate every concrete state path through pruned layers.

	Each path lists the state reached after each layer's transition.
	"""

	if not layers or not layers[0]:
		return []

	paths = [[state] for state in unique(t.target for t in layers[0])]

	for layer in layers[1:]:
		extended: typing.List[typing.List[jzautomaton.graph.State]] = []

		for transition in layer:
			for path in paths:
				if path[-1] is transition.source:
					extended.append(path + [transition.target])

		paths = extended

	return paths


def sample_path (layers: typing.Sequence[Layer], rng: typing.Optional[random.Random] = None) -> typing.List[jzautomaton.graph.Transition]:

	"""Choose one walk through the layers, weighting each step by count.

	Raises:
		NoViableChoiceError: If a step has no candidate with positive weight.
	"""

	path: typing.List[jzautomaton.graph.Transition] = []

	for layer in layers:

		if path:
			candidates = [t for t in layer if t.source is path[-1].target]
		else:
			candidates = list(layer)

		path.append(jzautomaton.sampling.choose_transition(candidates, rng))

	return path
