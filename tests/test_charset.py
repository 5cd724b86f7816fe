import numpy as np
import pytest
import torch

from charset import SymbolTable
from errors import DuplicateSymbolError, UnknownSymbolError


def test_duplicate_symbol():
    with pytest.raises(DuplicateSymbolError) as exc:
        SymbolTable(['0', '1', '0'])
    assert exc.value.symbol == '0'


def test_indices_follow_order():
    t = SymbolTable('ab+ ')
    assert t.size == 4
    assert t.index('a') == 0
    assert t.index(' ') == 3
    assert t.indices_char[2] == '+'


def test_encode_leaves_trailing_rows_zero():
    t = SymbolTable(['0', '1', '+', ' '])
    x = t.encode('1+0', 5)
    assert x.shape == (5, 4)
    assert x[0].tolist() == [0, 1, 0, 0]
    assert x[1].tolist() == [0, 0, 1, 0]
    assert x[2].tolist() == [1, 0, 0, 0]
    assert x[3].sum().item() == 0
    assert x[4].sum().item() == 0


def test_encode_unknown_symbol():
    t = SymbolTable(['0', '1', '+', ' '])
    with pytest.raises(UnknownSymbolError) as exc:
        t.encode('1-0', 3)
    assert exc.value.symbol == '-'
    assert exc.value.row == 1


def test_encode_batch_unknown_symbol_names_sample(table):
    with pytest.raises(UnknownSymbolError) as exc:
        table.encode_batch(['1+2', '3*4'], 5)
    assert exc.value.sample == 1
    assert exc.value.row == 1


def test_encode_batch_shape_and_one_hot(table):
    xs = table.encode_batch(['1+2  ', '10+99'], 5)
    assert xs.shape == (2, 5, table.size)
    assert torch.all(xs.sum(dim=-1) == 1)


def test_round_trip_padded(table):
    for s in ['12+7 ', '0+0  ', '99+99', '     ']:
        assert table.decode(table.encode(s, 5)) == s


def test_decode_indices_without_argmax(table):
    idx = [table.index(c) for c in '19 ']
    assert table.decode(torch.tensor(idx), use_argmax=False) == '19 '
    assert table.decode(np.array(idx), use_argmax=False) == '19 '


def test_decode_ties_pick_first_index():
    t = SymbolTable(['0', '1', '+', ' '])
    scores = torch.tensor([[0.1, 0.4, 0.4, 0.1], [0.25, 0.25, 0.25, 0.25]])
    assert t.decode(scores) == '10'


def test_decode_batch(table):
    xs = table.encode_batch(['1+2  ', '10+99'], 5)
    assert table.decode_batch(xs) == ['1+2  ', '10+99']


def test_encode_truncates_to_num_rows():
    t = SymbolTable(['0', '1', '+', ' '])
    x = t.encode('10+11', 3)
    assert x.shape == (3, 4)
    assert t.decode(x) == '10+'


def test_encode_batch_truncates_each_string():
    t = SymbolTable(['0', '1', '+', ' '])
    xs = t.encode_batch(['1+1', '10+11'], 3)
    assert xs.shape == (2, 3, 4)
    assert t.decode_batch(xs) == ['1+1', '10+']


def test_truncated_characters_are_still_checked():
    t = SymbolTable(['0', '1', '+', ' '])
    with pytest.raises(UnknownSymbolError) as exc:
        t.encode_batch(['1+1', '10+1x'], 3)
    assert exc.value.sample == 1
    assert exc.value.row == 4
