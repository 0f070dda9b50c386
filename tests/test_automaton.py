import dataclasses
import random
import re
import typing

import pytest

import conftest
import jzautomaton.automaton


def _counts (automaton: jzautomaton.automaton.Automaton) -> typing.List[typing.Tuple[str, float]]:

	return [(str(t), t.count) for t in automaton.get_transitions()]


def test_invalid_limits_rejected () -> None:

	"""Retry and length limits must be at least 1."""

	with pytest.raises(ValueError):
		jzautomaton.automaton.Automaton(max_attempts=0)

	with pytest.raises(ValueError):
		jzautomaton.automaton.Automaton(max_length=0)


def test_get_or_create_state (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""A named state leading to a target should be reused, and created when missing."""

	tonic = functional_automaton.get_state_by_name("Tonic")
	dominant = functional_automaton.get_state_by_name("Dominant")
	assert tonic is not None and dominant is not None

	created = functional_automaton.get_state_with_name_and_transition("V / IM", tonic, is_start=True)
	assert created.is_start and not created.is_end
	assert created in functional_automaton.states

	created.add_transition("IM", tonic)

	assert functional_automaton.get_state_with_name_and_transition("V / IM", tonic) is created
	assert functional_automaton.get_state_with_name_and_transition("V / IM", dominant) is not created
	assert len(functional_automaton.get_states_by_name("V / IM")) == 2


def test_state_queries (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""States can be found by name and by regular expression."""

	assert functional_automaton.get_state_by_name("Missing") is None
	assert [s.name for s in functional_automaton.get_states_by_regex("dominant")] == ["Subdominant"]
	assert [s.name for s in functional_automaton.get_states_by_regex(re.compile("^(Sub)?[Dd]ominant$"))] == ["Subdominant", "Dominant"]


def test_transition_queries (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Global transition queries should search every state."""

	tonic = functional_automaton.get_state_by_name("Tonic")

	assert len(functional_automaton.get_transitions()) == 13
	assert len(functional_automaton.get_transitions_by_symbol("VIm")) == 3
	assert len(functional_automaton.get_transitions_by_quality("x")) == 2
	assert len(functional_automaton.get_transitions_by_target(tonic)) == 4
	assert len(functional_automaton.get_transitions_by_params(source=tonic, quality="m")) == 4

	# Every state with a start flag also has arrivals, so only Tonic -> Passing cannot open a walk.
	initial = functional_automaton.get_initial_transitions()
	assert len(initial) == 12
	assert all(t.target.is_start for t in initial)


def test_single_edge_training_scenario (single_edge_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Training once on the only edge should make it certain."""

	assert single_edge_automaton.train_sequence(["IM"]) is True
	assert single_edge_automaton.get_state_probabilities_given_symbol("IM") == {"S1": 1.0}


def test_failure_point_scenario (single_edge_automaton: jzautomaton.automaton.Automaton) -> None:

	"""An unreadable second symbol should fail at index 1 with the state reached so far."""

	failure = single_edge_automaton.find_failure_point(["IM", "IIm"])

	assert failure is not None
	assert failure.index == 1
	assert failure.invalid_end_state is False
	assert [s.name for s in failure.previous_states] == ["S1"]
	assert str(failure.symbol) == "IIm"


def test_training_splits_credit (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Each position should share one unit of credit among its admissible transitions."""

	assert functional_automaton.train_sequence(["IM", "VIm", "IIm", "Vx", "IM"])

	assert conftest.transition(functional_automaton, "Tonic", "IM", "Tonic").count == pytest.approx(0.5)
	assert conftest.transition(functional_automaton, "Dominant", "IM", "Tonic").count == pytest.approx(1.5)
	assert conftest.transition(functional_automaton, "Tonic", "VIm", "Tonic").count == pytest.approx(0.5)
	assert conftest.transition(functional_automaton, "Tonic", "VIm", "Subdominant").count == pytest.approx(0.5)
	assert conftest.transition(functional_automaton, "Tonic", "IIm", "Subdominant").count == pytest.approx(0.5)
	assert conftest.transition(functional_automaton, "Subdominant", "IIm", "Subdominant").count == pytest.approx(0.5)
	assert conftest.transition(functional_automaton, "Subdominant", "Vx", "Dominant").count == pytest.approx(1.0)

	# Never reached, so never credited.
	assert conftest.transition(functional_automaton, "Tonic", "IIIm", "Passing").count == 0


def test_rejected_sequence_changes_nothing (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""An unreadable sequence should be rejected without touching any count."""

	before = _counts(functional_automaton)

	assert functional_automaton.train_sequence(["Vx", "IIm"]) is False
	assert functional_automaton.train_sequence(["IM", "IIIm"]) is False
	assert functional_automaton.train_sequence([]) is False
	assert _counts(functional_automaton) == before


def test_training_is_order_independent () -> None:

	"""Training on the same sequences in a different order should give the same counts."""

	forward = conftest.build_functional_automaton()
	backward = conftest.build_functional_automaton()

	forward.train_sequences(conftest.TRAINING_SEQUENCES)
	backward.train_sequences(list(reversed(conftest.TRAINING_SEQUENCES)))

	for (name_a, count_a), (name_b, count_b) in zip(_counts(forward), _counts(backward)):
		assert name_a == name_b
		assert count_a == pytest.approx(count_b)


def test_train_sequences_counts_accepted (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""train_sequences should report how many sequences were accepted."""

	assert functional_automaton.train_sequences([["IIm", "Vx", "IM"], ["Vx", "IIm"], ["IVM", "Vx", "IM"]]) == 2


def test_validate_matches_failure_point (trained_automaton: jzautomaton.automaton.Automaton) -> None:

	"""validate should be True exactly when there is no failure point."""

	candidates = [
		["IIm", "Vx", "IM"],
		["Vx", "IM"],
		["IM", "IIIm"],
		["IM", "Vx"],
		["bIIx"],
		["IM", "IIIm", "IIm"],
	]

	for symbols in candidates:
		assert trained_automaton.validate(symbols) == (trained_automaton.find_failure_point(symbols) is None)

	assert trained_automaton.validate(["IIm", "Vx", "IM"])
	assert not trained_automaton.validate(["IM", "Vx"])


def test_failure_at_first_symbol (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""A symbol no walk can start with should fail at index 0."""

	failure = functional_automaton.find_failure_point(["bIIx", "IM"])

	assert failure is not None
	assert failure.index == 0
	assert failure.previous_states == []


def test_failure_on_empty_input (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""An empty symbol list cannot be accepted."""

	failure = functional_automaton.find_failure_point([])

	assert failure is not None
	assert failure.symbol is None
	assert failure.index == 0


def test_invalid_end_state (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Ending on a non-end state should be reported at the last symbol."""

	failure = functional_automaton.find_failure_point(["IM", "IIIm"])

	assert failure is not None
	assert failure.invalid_end_state is True
	assert failure.index == 1
	assert [s.name for s in failure.previous_states] == ["Passing"]


def test_analyze (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Analysis should list every functional reading of an ambiguous progression."""

	paths = functional_automaton.analyze(["IM", "VIm", "IIm"])

	assert sorted(tuple(s.name for s in path) for path in paths) == [
		("Tonic", "Subdominant", "Subdominant"),
		("Tonic", "Tonic", "Subdominant"),
	]

	assert functional_automaton.analyze(["Vx", "IIm"]) == []


def test_pathways_are_pruned (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Every transition in a pathway layer should continue into the next layer."""

	layers = functional_automaton.get_pathways(["IM", "VIm", "IIm", "Vx", "IM"])

	assert len(layers) == 5

	for current, following in zip(layers, layers[1:]):
		sources = {t.source for t in following}
		assert all(t.target in sources for t in current)

	assert all(t.target.is_end for t in layers[-1])


@dataclasses.dataclass
class FakeChart:

	sections: typing.Dict[str, typing.List[str]]

	def symbols (self, wrap_around: bool = False) -> typing.List[str]:

		symbols = [s for section in self.sections.values() for s in section]

		return symbols + symbols[:1] if wrap_around else symbols

	def section_symbols (self, wrap_around: bool = False) -> typing.Dict[str, typing.List[str]]:

		if not wrap_around:
			return self.sections

		return {name: section + section[:1] for name, section in self.sections.items()}


@dataclasses.dataclass
class FakeCorpus:

	charts: typing.List[FakeChart]


def test_fake_corpus_satisfies_protocols () -> None:

	"""The test corpus should match the runtime-checkable protocols."""

	chart = FakeChart({"A": ["IM"]})

	assert isinstance(chart, jzautomaton.automaton.Chart)
	assert isinstance(FakeCorpus([chart]), jzautomaton.automaton.Corpus)


def test_train_corpus_by_section (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Sections shorter than the minimum size should be skipped."""

	corpus = FakeCorpus([
		FakeChart({"A": ["IIm", "Vx", "IM"], "B": ["IM"], "C": ["Vx", "IIm"]}),
		FakeChart({"A": ["IVM", "Vx", "IM"]}),
	])

	assert functional_automaton.train_corpus_by_section(corpus) == 2
	assert functional_automaton.train_corpus_by_section(corpus, min_section_size=1) == 3


def test_train_corpus_by_song (functional_automaton: jzautomaton.automaton.Automaton) -> None:

	"""Whole songs should be trained, with the opening repeated when wrapping around."""

	corpus = FakeCorpus([
		FakeChart({"A": ["IM", "IIm"], "B": ["Vx", "IM"]}),
		FakeChart({"A": ["Vx", "IIm"]}),
	])

	assert functional_automaton.train_corpus_by_song(corpus) == 1
	assert functional_automaton.train_corpus_by_song_with_wrap_around(corpus) == 1
	assert functional_automaton.train_corpus_by_section_with_wrap_around(corpus, min_section_size=3) == 0


def test_default_rng_is_created () -> None:

	"""An automaton without an injected generator should make its own."""

	automaton = jzautomaton.automaton.Automaton()

	assert isinstance(automaton.rng, random.Random)
