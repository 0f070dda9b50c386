import pytest

import jzautomaton.automaton


CADENCE = ["IM", "VIm", "IIm", "Vx", "IM"]


def test_state_probabilities_given_symbol (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""An ambiguous symbol should split between the functions it served."""

	functional_automaton.train_sequence(CADENCE)
	probabilities = functional_automaton.get_state_probabilities_given_symbol("VIm")

	assert probabilities == {"Tonic": 0.5, "Subdominant": 0.5}
	assert list(probabilities) == ["Tonic", "Subdominant"]


def test_transition_probabilities_key_types (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Transitions leaving matching states can be keyed three ways, most probable first."""

	functional_automaton.train_sequence(CADENCE)

	assert functional_automaton.get_transition_probabilities_given_state_regex("^Dominant$") == {"IM: Tonic": 1.0}

	by_symbol = functional_automaton.get_transition_probabilities_given_state_regex("^Tonic$", key_type="symbol")
	assert by_symbol == {"VIm": 0.5, "IM": 0.25, "IIm": 0.25}
	assert list(by_symbol) == ["VIm", "IM", "IIm"]

	by_state = functional_automaton.get_transition_probabilities_given_state_regex("^Tonic$", key_type="state")
	assert by_state == {"Tonic": 0.5, "Subdominant": 0.5}


def test_unknown_key_type_raises (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Only transition, symbol and state keys are supported."""

	with pytest.raises(ValueError):
		functional_automaton.get_transition_probabilities_given_state_regex("Tonic", key_type="chord")


def test_symbol_probabilities_given_state_regex (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Symbols landing in matching states should be weighted by count."""

	functional_automaton.train_sequence(CADENCE)
	probabilities = functional_automaton.get_symbol_probabilities_given_state_regex("Subdominant")

	assert probabilities == pytest.approx({"IIm": 2 / 3, "VIm": 1 / 3})
	assert list(probabilities) == ["IIm", "VIm"]


def test_untrained_reports_are_empty (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Zero-count transitions should never appear in a report."""

	assert functional_automaton.get_state_probabilities_given_symbol("IM") == {}
	assert functional_automaton.get_transition_probabilities_given_state_regex(".") == {}
