import re

import numpy as np
import pytest

from config import PAD_CHAR, max_unique_samples
from data import (
    AdditionDataset, convert_data_to_tensors, generate_data, random_int, split_data
)


def _canonical(expression):
    a, b = expression.strip(PAD_CHAR).split('+')
    return tuple(sorted((int(a), int(b))))


@pytest.mark.parametrize('digits,count', [(1, 5), (1, 55), (2, 300), (3, 200)])
def test_generate_unique_and_padded(digits, count):
    data = generate_data(digits, count, np.random.default_rng(0))
    assert len(data) == count
    assert len({_canonical(q) for q, _ in data}) == count
    for q, a in data:
        assert len(q) == 2 * digits + 1
        assert len(a) == digits + 1


def test_generate_one_digit_pattern():
    data = generate_data(1, 5, np.random.default_rng(1))
    keys = [_canonical(q) for q, _ in data]
    assert len(keys) == len(set(keys))
    for q, _ in data:
        assert re.fullmatch(r'[0-9]\+[0-9]', q)


def test_operands_sorted_and_sum_correct():
    for q, a in generate_data(2, 100, np.random.default_rng(2)):
        x, y = (int(v) for v in q.strip(PAD_CHAR).split('+'))
        assert x <= y
        assert int(a.strip(PAD_CHAR)) == x + y


def test_padding_is_on_the_right():
    for q, a in generate_data(3, 50, np.random.default_rng(3)):
        assert q == q.rstrip(PAD_CHAR) + PAD_CHAR * (len(q) - len(q.rstrip(PAD_CHAR)))
        assert not q.startswith(PAD_CHAR)
        assert not a.startswith(PAD_CHAR)


def test_full_enumeration_one_digit():
    data = generate_data(1, max_unique_samples(1), np.random.default_rng(4))
    assert len({_canonical(q) for q, _ in data}) == 55


def test_random_int_range():
    rng = np.random.default_rng(5)
    values = [random_int(3, rng) for _ in range(500)]
    assert all(0 <= v <= 999 for v in values)


def test_same_seed_same_data():
    a = generate_data(2, 50, np.random.default_rng(7))
    b = generate_data(2, 50, np.random.default_rng(7))
    assert a == b


def test_split_data():
    data = list(range(20))
    train, val = split_data(data)
    assert train == list(range(18))
    assert val == [18, 19]


def test_convert_data_to_tensors(table):
    data = generate_data(2, 10, np.random.default_rng(8))
    xs, ys = convert_data_to_tensors(data, table, 2)
    assert xs.shape == (10, 5, table.size)
    assert ys.shape == (10, 3, table.size)
    assert table.decode(xs[0]) == data[0][0]
    assert table.decode(ys[0]) == data[0][1]


def test_addition_dataset(table):
    ds = AdditionDataset(16, 2, table, seed=0)
    assert len(ds) == 16
    x, y = ds[3]
    assert table.decode(x) == ds.samples[3][0]
    assert table.decode(y) == ds.samples[3][1]
