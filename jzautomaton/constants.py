"""Default limits and rendering settings."""

# Restarts allowed for a Monte-Carlo construction (prepend_full, add_full, ...)
# before it gives up with GenerationFailedError.
DEFAULT_MAX_ATTEMPTS = 100

# Transitions a single open-ended grow operation may add before the attempt
# counts as failed.
DEFAULT_MAX_LENGTH = 64

# Sections shorter than this are skipped when training a corpus by section.
DEFAULT_MIN_SECTION_SIZE = 2

DEFAULT_KEY = "C"
DEFAULT_BPM = 120
DEFAULT_BEATS_PER_CHORD = 4
DEFAULT_ROOT_MIDI = 48
DEFAULT_VELOCITY = 80
TICKS_PER_BEAT = 480
