"""Hyperparameters and constants for the addition RNN."""

from errors import ConfigurationRangeError, UnsupportedCellTypeError

# Vocabulary
CHARS = '0123456789+ '
PLUS_CHAR = '+'
PAD_CHAR = ' '
VOCAB_SIZE = len(CHARS)   # 12

# Data
MIN_DIGITS = 1
MAX_DIGITS = 5
DIGITS = 2
TRAINING_SIZE = 5000
TRAIN_SPLIT = 0.9         # first 90% train, rest validation

# Model architecture
RNN_TYPES = ('SimpleRNN', 'GRU', 'LSTM')
RNN_TYPE = 'SimpleRNN'
RNN_LAYERS = 1
HIDDEN_SIZE = 128

# Training
BATCH_SIZE = 128
LR = 1e-3
ITERATIONS = 100
NUM_TEST_EXAMPLES = 20


def expression_length(digits):
    """Two operands of up to `digits` characters plus the '+'."""
    return 2 * digits + 1


def answer_length(digits):
    return digits + 1


def training_size_limit(digits):
    return (10 ** digits) ** 2


def max_unique_samples(digits):
    """Number of distinct canonical (sorted) operand pairs."""
    n = 10 ** digits
    return n * (n + 1) // 2


def check_config(digits, training_size, rnn_type=RNN_TYPE, layers=RNN_LAYERS,
                 hidden_size=HIDDEN_SIZE, batch_size=BATCH_SIZE, iterations=ITERATIONS,
                 num_test_examples=NUM_TEST_EXAMPLES):
    """Raise ConfigurationRangeError if any run setting is out of range.

    An unknown rnn_type raises UnsupportedCellTypeError instead.
    """
    if digits < MIN_DIGITS or digits > MAX_DIGITS:
        raise ConfigurationRangeError(
            f'digits must be >= {MIN_DIGITS} and <= {MAX_DIGITS}')
    # Any count above the distinct-pair ceiling would make generation loop forever
    limit = min(training_size_limit(digits), max_unique_samples(digits))
    if training_size > limit:
        raise ConfigurationRangeError(
            f'With digits = {digits}, you cannot have more than {limit} examples')
    if getattr(rnn_type, 'value', rnn_type) not in RNN_TYPES:
        raise UnsupportedCellTypeError(rnn_type)
    if training_size < 2:
        raise ConfigurationRangeError('trainingSize must be >= 2')
    if layers < 1:
        raise ConfigurationRangeError('layers must be >= 1')
    if hidden_size < 1:
        raise ConfigurationRangeError('hiddenSize must be >= 1')
    if batch_size < 1:
        raise ConfigurationRangeError('batchSize must be >= 1')
    if iterations < 1:
        raise ConfigurationRangeError('iterations must be >= 1')
    if num_test_examples < 0:
        raise ConfigurationRangeError('numTestExamples must be >= 0')
