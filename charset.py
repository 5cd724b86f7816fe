"""Character table: maps between strings and one-hot tensors.

Each string becomes a (num_rows, vocab) float tensor with one 1 per
character row. Rows past the end of the string stay zero, so callers pad
strings with PAD_CHAR first when every row should be one-hot. Longer
strings are truncated to their first num_rows characters.
"""

import numpy as np
import torch

from errors import DuplicateSymbolError, UnknownSymbolError


class SymbolTable:
    def __init__(self, chars):
        self.chars = tuple(chars)
        self.size = len(self.chars)
        self.char_indices = {}
        self.indices_char = {}
        for i, ch in enumerate(self.chars):
            if ch in self.char_indices:
                raise DuplicateSymbolError(ch)
            self.char_indices[ch] = i
            self.indices_char[i] = ch

    def __len__(self):
        return self.size

    def index(self, ch):
        return self.char_indices[ch]

    def _fill(self, buf, string, sample=None):
        num_rows = buf.shape[0]
        for i, ch in enumerate(string):
            idx = self.char_indices.get(ch)
            if idx is None:
                raise UnknownSymbolError(ch, i, sample)
            # Characters past num_rows are checked but dropped
            if i < num_rows:
                buf[i, idx] = 1.0

    def encode(self, string, num_rows):
        """(num_rows, size) one-hot tensor for a single string."""
        buf = np.zeros((num_rows, self.size), dtype=np.float32)
        self._fill(buf, string)
        return torch.from_numpy(buf)

    def encode_batch(self, strings, num_rows):
        """(N, num_rows, size) one-hot tensor, one slab per string."""
        buf = np.zeros((len(strings), num_rows, self.size), dtype=np.float32)
        for n, string in enumerate(strings):
            self._fill(buf[n], string, sample=n)
        return torch.from_numpy(buf)

    def decode(self, x, use_argmax=True):
        """Turn a (rows, size) score tensor, or a 1-D index sequence, into a string.

        With use_argmax the first maximum in each row wins.
        """
        if isinstance(x, torch.Tensor):
            x = x.detach().cpu().numpy()
        x = np.asarray(x)
        if use_argmax:
            x = x.argmax(axis=-1)
        return ''.join(self.indices_char[int(i)] for i in x.reshape(-1))

    def decode_batch(self, x, use_argmax=True):
        return [self.decode(row, use_argmax) for row in x]
