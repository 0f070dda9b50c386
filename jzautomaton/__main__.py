import argparse
import logging
import os
import random
import sys
import typing

import yaml

import jzautomaton.automaton
import jzautomaton.constants
import jzautomaton.errors
import jzautomaton.rendering
import jzautomaton.sequence
import jzautomaton.serialization
import jzautomaton.topology


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def build_automaton (model_config: dict, rng: typing.Optional[random.Random]) -> jzautomaton.automaton.Automaton:

	"""
	Load a saved automaton, or build an untrained one from a named topology.
	"""

	if model_config.get('load'):
		return jzautomaton.serialization.load(model_config['load'], rng)

	topology = model_config.get('topology', 'default')
	automaton = jzautomaton.topology.create_automaton(topology, rng)
	logger.info(f"Built {topology} topology: {len(automaton.states)} states, {len(automaton.get_transitions())} transitions")

	return automaton


def generate (automaton: jzautomaton.automaton.Automaton, generation_config: dict) -> jzautomaton.sequence.Sequence:

	"""
	Generate one sequence according to the generation settings.
	"""

	start_symbol = generation_config.get('start_symbol')
	end_symbol = generation_config.get('end_symbol')
	length = generation_config.get('length')
	allow_repeats = bool(generation_config.get('allow_repeats', False))

	if length and start_symbol and end_symbol:
		return automaton.generate_n_length_sequence(length, start_symbol, end_symbol)

	if start_symbol and end_symbol:
		return automaton.generate_sequence_from_start_and_end(start_symbol, end_symbol)

	if start_symbol and length:
		return automaton.generate_sequence_from_start_and_length(start_symbol, length)

	return automaton.build_sequence(start_symbol).add_full(allow_repeats)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Train an automaton, generate progressions and optionally render them to MIDI.
	"""

	parser = argparse.ArgumentParser(description="Generate jazz chord progressions with a weighted chord-function automaton")
	parser.add_argument("config", nargs="?", default="config.yaml", help="YAML config file (default: config.yaml)")
	args = parser.parse_args(argv)

	config = load_config(args.config)

	model_config = config.get('model', {})
	training_config = config.get('training', {})
	generation_config = config.get('generation', {})
	render_config = config.get('render', {})

	seed = generation_config.get('seed')
	rng = random.Random(seed) if seed is not None else None

	automaton = build_automaton(model_config, rng)

	sequences = training_config.get('sequences', [])

	if sequences:
		accepted = automaton.train_sequences(sequences)
		logger.info(f"Trained on {accepted} of {len(sequences)} sequences")

	if model_config.get('save'):
		jzautomaton.serialization.save(automaton, model_config['save'])

	key_name = render_config.get('key', jzautomaton.constants.DEFAULT_KEY)
	generated: typing.List[jzautomaton.sequence.Sequence] = []

	for i in range(generation_config.get('count', 1)):

		try:
			sequence = generate(automaton, generation_config)

		except jzautomaton.errors.GenerationFailedError as e:
			logger.error(f"Generation failed: {e}")
			return 1

		generated.append(sequence)
		logger.info(f"Sequence {i + 1}:\n{sequence.describe(key_name)}")

	if render_config.get('filename') and generated:
		jzautomaton.rendering.sequence_to_midi(
			generated[0],
			render_config['filename'],
			key_name = key_name,
			bpm = render_config.get('bpm', jzautomaton.constants.DEFAULT_BPM)
		)

	return 0


if __name__ == "__main__":
	sys.exit(main())
