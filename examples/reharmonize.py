"""
jzautomaton - Reharmonizing a standard

Trains the default jazz automaton on a few turnarounds, then takes one
progression and regenerates each of its phrases in turn, printing the
functional analysis alongside the chord names. The last variation is
written to a MIDI file.

How to run
──────────
1. pip install -e .
2. Run: python examples/reharmonize.py
"""

import logging
import random

import jzautomaton
import jzautomaton.rendering

logging.basicConfig(level=logging.INFO)

KEY = "F"

CORPUS = [
	["IIm", "Vx", "IM"],
	["IM", "VIm", "IIm", "Vx", "IM"],
	["IIIm", "VIx", "IIm", "Vx", "IM"],
	["IM", "bIIIo", "IIm", "Vx", "IM"],
	["IVM", "bVIIx", "IIIm", "VIx", "IIm", "Vx", "IM"],
	["IM", "IVM", "IVm", "bVIIx", "IM"],
]

automaton = jzautomaton.create_automaton(rng=random.Random(2024))
accepted = automaton.train_sequences(CORPUS)
logging.info(f"Trained on {accepted} of {len(CORPUS)} progressions")

# How is VIm used: as a tonic substitute or on the way to ii?
for name, probability in list(automaton.get_state_probabilities_given_symbol("VIm").items())[:5]:
	logging.info(f"VIm -> {name}: {probability:.2f}")

sequence = automaton.generate_n_length_sequence(6, "IM", "IM")
logging.info(f"Original:\n{sequence.describe(KEY)}")

# Phrase lengths change as we go, so stop at whichever sequence runs out first.
index = 0

while index < len(sequence):
	sequence = sequence.reharmonize_at_index(index)
	logging.info(f"Reharmonized at {index}:\n{sequence.describe(KEY)}")
	index += 2

jzautomaton.rendering.sequence_to_midi(sequence, "reharmonized.mid", key_name=KEY, bpm=100)
