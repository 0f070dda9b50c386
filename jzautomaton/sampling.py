"""Weighted random selection of transitions by count."""

import random
import typing

import jzautomaton.errors


_default_rng = random.Random()


def total_count (transitions: typing.Iterable["jzautomaton.graph.Transition"]) -> float:

	"""
	Return the summed count of the given transitions.
	"""

	return sum(t.count for t in transitions)


def transitions_with_probabilities (transitions: typing.Sequence["jzautomaton.graph.Transition"]) -> typing.List[typing.Tuple["jzautomaton.graph.Transition", float]]:

	"""
	Pair each transition with its share of the subset's total count.

	With a zero total every probability is 0.0.
	"""

	total = total_count(transitions)

	if total <= 0:
		return [(t, 0.0) for t in transitions]

	return [(t, t.count / total) for t in transitions]


def choose_transition (
	transitions: typing.Sequence["jzautomaton.graph.Transition"],
	rng: typing.Optional[random.Random] = None
) -> "jzautomaton.graph.Transition":

	"""Choose one transition with probability proportional to its count.

	A single uniform draw in [0, 1) is compared against the running sum of
	normalised probabilities, in input order; the first transition whose
	cumulative probability exceeds the draw wins. Zero-count transitions are
	never chosen.

	Parameters:
		transitions: Candidate transitions.
		rng: Optional seeded ``random.Random``.

	Raises:
		NoViableChoiceError: If there are no candidates or their counts sum to zero.
	"""

	if not transitions:
		raise jzautomaton.errors.NoViableChoiceError("No transitions to choose from")

	options = transitions_with_probabilities(transitions)

	if not any(probability > 0 for _, probability in options):
		raise jzautomaton.errors.NoViableChoiceError(
			f"All {len(transitions)} candidate transitions have zero weight"
		)

	roll = (rng or _default_rng).random()
	accum = 0.0

	for transition, probability in options:
		accum += probability
		if accum > roll:
			return transition

	# Rounding can leave the running sum a hair below the draw.
	return [t for t, probability in options if probability > 0][-1]
