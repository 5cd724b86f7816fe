"""Data generation and dataset class for string-to-string integer addition."""

import numpy as np
import torch
from torch.utils.data import Dataset

from config import (
    PAD_CHAR, PLUS_CHAR, TRAIN_SPLIT, expression_length, answer_length
)


def random_int(digits, rng):
    """Random integer built from `digits` independently drawn decimal digits.

    Uniform over digit strings, not over the integer range: '007' -> 7.
    """
    return int(''.join(str(d) for d in rng.integers(0, 10, size=digits)))


def generate_data(digits, num_examples, rng=None):
    """Generate num_examples unique (expression, answer) pairs.

    Operands are sorted before the dedup check, so '3+5' and '5+3' collide.
    num_examples must not exceed config.max_unique_samples(digits) or this
    never returns.

    Returns:
        list of (expression, answer) str tuples, padded on the right with
        PAD_CHAR to 2*digits+1 and digits+1 characters.
    """
    if rng is None:
        rng = np.random.default_rng()
    max_len = expression_length(digits)
    ans_len = answer_length(digits)

    output = []
    seen = set()
    while len(output) < num_examples:
        a = random_int(digits, rng)
        b = random_int(digits, rng)
        lo, hi = (a, b) if a <= b else (b, a)
        quest = f'{lo}{PLUS_CHAR}{hi}'
        if quest in seen:
            continue
        seen.add(quest)

        quest += PAD_CHAR * (max_len - len(quest))
        ans = str(a + b)
        ans += PAD_CHAR * (ans_len - len(ans))
        output.append((quest, ans))
    return output


def split_data(data, train_split=TRAIN_SPLIT):
    """Positional split: first floor(n * train_split) train, the rest validation."""
    split = int(len(data) * train_split)
    return data[:split], data[split:]


def convert_data_to_tensors(data, table, digits):
    """Encode [(expression, answer), ...] into (xs, ys) one-hot tensors."""
    questions = [item[0] for item in data]
    answers = [item[1] for item in data]
    return (
        table.encode_batch(questions, expression_length(digits)),
        table.encode_batch(answers, answer_length(digits)),
    )


class AdditionDataset(Dataset):
    """Freshly generated addition samples, kept both as text and one-hot tensors."""

    def __init__(self, num_examples, digits, table, seed=None):
        rng = np.random.default_rng(seed)
        self.digits = digits
        self.samples = generate_data(digits, num_examples, rng)
        self.xs, self.ys = convert_data_to_tensors(self.samples, table, digits)

    def __len__(self):
        return self.xs.shape[0]

    def __getitem__(self, idx):
        return self.xs[idx], self.ys[idx]
