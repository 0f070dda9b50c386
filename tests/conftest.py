import random
import typing

import pytest

import jzautomaton.automaton
import jzautomaton.graph


TRAINING_SEQUENCES: typing.List[typing.List[str]] = [
	["IM", "VIm", "IIm", "Vx", "IM"],
	["IIm", "Vx", "IM"],
	["IVM", "Vx", "IM"],
	["IM", "IVM", "IIm", "Vx", "IM"],
	["IM", "IIIm", "IIm", "Vx", "IM"],
]


def build_functional_automaton (rng: typing.Optional[random.Random] = None) -> jzautomaton.automaton.Automaton:

	"""Build a three-function automaton with one non-end passing state.

	``VIm`` is ambiguous: it can prolong the tonic or move to the subdominant.
	"""

	automaton = jzautomaton.automaton.Automaton(rng=rng)

	tonic = automaton.add_state("Tonic", is_start=True, is_end=True)
	subdominant = automaton.add_state("Subdominant", is_start=True, is_end=True)
	dominant = automaton.add_state("Dominant", is_start=True, is_end=True)
	passing = automaton.add_state("Passing")

	automaton.add_transition("IM", tonic, tonic)
	automaton.add_transition("VIm", tonic, tonic)
	automaton.add_transition("IIm", tonic, subdominant)
	automaton.add_transition("IVM", tonic, subdominant)
	automaton.add_transition("VIm", tonic, subdominant)
	automaton.add_transition("IIIm", tonic, passing)

	automaton.add_transition("IIm", passing, subdominant)

	automaton.add_transition("IIm", subdominant, subdominant)
	automaton.add_transition("IVM", subdominant, subdominant)
	automaton.add_transition("Vx", subdominant, dominant)

	automaton.add_transition("Vx", dominant, dominant)
	automaton.add_transition("IM", dominant, tonic)
	automaton.add_transition("VIm", dominant, tonic)

	return automaton


@pytest.fixture
def functional_automaton () -> jzautomaton.automaton.Automaton:

	"""An untrained functional automaton with a seeded random generator."""

	return build_functional_automaton(random.Random(7))


@pytest.fixture
def trained_automaton (functional_automaton: jzautomaton.automaton.Automaton) -> jzautomaton.automaton.Automaton:

	"""The functional automaton trained on a handful of cadences."""

	functional_automaton.train_sequences(TRAINING_SEQUENCES)

	return functional_automaton


@pytest.fixture
def single_edge_automaton () -> jzautomaton.automaton.Automaton:

	"""A start state joined to an end state by one ``IM`` transition."""

	automaton = jzautomaton.automaton.Automaton(rng=random.Random(1))

	s0 = automaton.add_state("S0", is_start=True)
	s1 = automaton.add_state("S1", is_end=True)
	automaton.add_transition("IM", s0, s1)

	return automaton


@pytest.fixture
def elaboration_automaton () -> jzautomaton.automaton.Automaton:

	"""A direct ``Home -> Away`` edge with a two-hop and a three-hop detour, all weighted."""

	automaton = jzautomaton.automaton.Automaton(rng=random.Random(3))

	home = automaton.add_state("Home", is_start=True)
	away = automaton.add_state("Away", is_end=True)
	m1 = automaton.add_state("M1")
	m2 = automaton.add_state("M2")
	m3 = automaton.add_state("M3")

	automaton.add_transition("IM", home, away, 1)
	automaton.add_transition("IIm", home, m1, 1)
	automaton.add_transition("Vx", m1, away, 1)
	automaton.add_transition("IIIm", home, m2, 1)
	automaton.add_transition("VIm", m2, m3, 1)
	automaton.add_transition("IIm", m3, away, 1)

	return automaton


def transition (
	automaton: jzautomaton.automaton.Automaton,
	source: str,
	symbol: str,
	target: str
) -> jzautomaton.graph.Transition:

	"""Look up a transition by state names and symbol."""

	found = automaton.get_transition_by_params(
		source = automaton.get_state_by_name(source),
		symbol = symbol,
		target = automaton.get_state_by_name(target)
	)

	assert found is not None

	return found
