"""Probability summaries over groups of transitions."""

import typing

import jzautomaton.graph
import jzautomaton.sampling


KeyFunction = typing.Callable[[jzautomaton.graph.Transition], str]


def state_key (transition: jzautomaton.graph.Transition) -> str:

	return transition.target.name


def symbol_key (transition: jzautomaton.graph.Transition) -> str:

	return str(transition.symbol)


def transition_key (transition: jzautomaton.graph.Transition) -> str:

	return f"{transition.symbol}: {transition.target.name}"


def probability_dict (transitions: typing.Sequence[jzautomaton.graph.Transition], key_function: KeyFunction) -> typing.Dict[str, float]:

	"""Group transitions by key and return each key's share of the total count.

	Zero-count transitions are skipped, so no key ever maps to 0.0. The result
	is ordered from most to least probable; equal probabilities keep the order
	in which their keys were first seen.

	Example:
		```python
		probability_dict(automaton.get_transitions_by_symbol("Vx"), state_key)
		# {"Dominant 5": 0.82, "V / IVM": 0.11, ...}
		```
	"""

	total = jzautomaton.sampling.total_count(transitions)
	counts: typing.Dict[str, float] = {}

	for t in transitions:

		if not t.count:
			continue

		key = key_function(t)
		counts[key] = counts.get(key, 0.0) + t.count

	# sorted() is stable, so ties stay in first-seen order.
	ranked = sorted(counts.items(), key=lambda item: -item[1])

	return {key: count / total for key, count in ranked}
