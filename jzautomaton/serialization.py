"""Save and load trained automata as JSON documents.

The document layout is::

	{
		"states": [{"name": "Tonic 1", "isStart": true, "isEnd": true}, ...],
		"transitions": [{"from": 0, "to": 3, "symbol": {"numeral": "II", "quality": "m"}, "count": 2.5}, ...]
	}

``from`` and ``to`` are positions in the ``states`` list. Transitions are
written state by state, so loading restores each state's transition order.
"""

import json
import logging
import random
import typing

import jzautomaton.automaton
import jzautomaton.symbols


logger = logging.getLogger(__name__)


def serialize (automaton: jzautomaton.automaton.Automaton) -> typing.Dict[str, typing.Any]:

	"""Return a JSON-compatible document describing the automaton's states and weighted transitions."""

	index_of = {id(state): i for i, state in enumerate(automaton.states)}

	states = [
		{"name": state.name, "isStart": state.is_start, "isEnd": state.is_end}
		for state in automaton.states
	]

	transitions = [
		{
			"from": index_of[id(t.source)],
			"to": index_of[id(t.target)],
			"symbol": {"numeral": t.symbol.numeral, "quality": t.symbol.quality},
			"count": t.count,
		}
		for t in automaton.get_transitions()
	]

	return {"states": states, "transitions": transitions}


def deserialize (
	document: typing.Mapping[str, typing.Any],
	rng: typing.Optional[random.Random] = None,
	**automaton_options: typing.Any
) -> jzautomaton.automaton.Automaton:

	"""Rebuild an automaton from a document produced by `serialize`.

	Parameters:
		document: The parsed document.
		rng: Optional seeded ``random.Random`` for the new automaton.
		automaton_options: Further `Automaton` keyword arguments
			(``max_attempts``, ``max_length``).

	Raises:
		ValueError: If a transition references a state index that does not exist.
	"""

	automaton = jzautomaton.automaton.Automaton(rng=rng, **automaton_options)

	for entry in document.get("states", []):
		automaton.add_state(entry["name"], bool(entry.get("isStart", False)), bool(entry.get("isEnd", False)))

	state_count = len(automaton.states)

	for position, entry in enumerate(document.get("transitions", [])):

		source_index = entry["from"]
		target_index = entry["to"]

		for index in (source_index, target_index):
			if not isinstance(index, int) or not 0 <= index < state_count:
				raise ValueError(f"Transition {position} references state {index!r}, but there are {state_count} states")

		symbol = jzautomaton.symbols.Symbol(entry["symbol"]["numeral"], entry["symbol"]["quality"])

		added = automaton.add_transition(
			symbol,
			automaton.states[source_index],
			automaton.states[target_index],
			entry.get("count", 0.0)
		)

		if added is None:
			logger.debug(f"Skipping duplicate transition {position} ({symbol})")

	return automaton


def save (automaton: jzautomaton.automaton.Automaton, filename: str) -> None:

	"""Write the automaton to a JSON file."""

	with open(filename, "w", encoding="utf-8") as f:
		json.dump(serialize(automaton), f, ensure_ascii=False, indent=1)

	logger.info(f"Saved {len(automaton.states)} states to {filename}")


def load (filename: str, rng: typing.Optional[random.Random] = None, **automaton_options: typing.Any) -> jzautomaton.automaton.Automaton:

	"""Read an automaton from a JSON file written by `save`."""

	with open(filename, encoding="utf-8") as f:
		document = json.load(f)

	automaton = deserialize(document, rng, **automaton_options)
	logger.info(f"Loaded {len(automaton.states)} states from {filename}")

	return automaton
