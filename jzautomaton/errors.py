"""Exceptions raised by the automaton and its sequences."""


class InvalidSequenceError(ValueError):

	"""A chain of transitions where one transition does not start where the previous one ended."""

	pass


class NoViableChoiceError(Exception):

	"""Weighted sampling was asked to choose from no candidates, or from candidates with zero total weight."""

	pass


class GenerationFailedError(Exception):

	"""A sequence could not be constructed within the allowed number of attempts."""

	pass
