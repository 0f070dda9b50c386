"""
jzautomaton - a weighted chord-function automaton for jazz harmony.

Chord progressions are read as walks through an automaton whose states are
harmonic functions (tonic, subdominant, dominant and the idioms that
decorate them: ii-V tonicization, tritone substitutes, passing and
neighbour chords). Transitions are labelled with scale-degree chord symbols
(``IIm``, ``Vx``, ``bVIIx``) and weighted by how often a corpus uses them.

- **Train** on symbol lists. Ambiguous symbols split their credit evenly
  between every functional reading that fits the whole progression.
- **Validate** progressions, and find exactly where an unplayable one breaks.
- **Analyse** a progression into the functional paths that explain it.
- **Generate** progressions: open-ended walks, fixed-length phrases between
  two chords, elaborations of a single chord change, and reharmonization
  of one phrase inside an existing progression.
- **Report** probabilities (which functions a symbol serves, which
  symbols realise a function).
- **Save and load** trained automata as JSON, and render progressions to MIDI.

Minimal example:

	```python
	import random
	import jzautomaton

	automaton = jzautomaton.create_automaton(rng=random.Random(1))
	automaton.train_sequences([
		["IM", "VIm", "IIm", "Vx", "IM"],
		["IIIm", "VIx", "IIm", "Vx", "IM"],
	])

	sequence = automaton.generate_n_length_sequence(4, "IIIm", "IM")
	print(sequence.describe("F"))
	```

Everything random takes its decisions from the automaton's ``rng``, so a
seeded ``random.Random`` makes generation repeatable.

Package-level exports: ``Automaton``, ``Sequence``, ``Symbol``,
``FailurePoint``, ``create_automaton``, the error types.
"""

import jzautomaton.automaton
import jzautomaton.errors
import jzautomaton.sequence
import jzautomaton.symbols
import jzautomaton.topology


Automaton = jzautomaton.automaton.Automaton
FailurePoint = jzautomaton.automaton.FailurePoint
Sequence = jzautomaton.sequence.Sequence
Symbol = jzautomaton.symbols.Symbol
create_automaton = jzautomaton.topology.create_automaton

InvalidSequenceError = jzautomaton.errors.InvalidSequenceError
NoViableChoiceError = jzautomaton.errors.NoViableChoiceError
GenerationFailedError = jzautomaton.errors.GenerationFailedError
