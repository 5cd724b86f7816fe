"""Encoder-decoder RNN for string-to-string integer addition.

Architecture (fixed pattern, cell type / width / depth configurable):
  encoder:  RNN stack over the one-hot expression (2*digits+1 steps),
            only the last step's top-layer output is kept
  repeat:   that vector is copied digits+1 times, one per answer position
  decoder:  RNN stack of the same kind, returns the full sequence
  head:     Linear(hidden -> vocab) applied at every timestep
  softmax:  per-timestep distribution over the alphabet

forward() returns pre-softmax logits so the loss can use log-softmax;
predict() returns the probabilities.
"""

from enum import Enum

import torch
import torch.nn as nn
import torch.nn.functional as F

from config import LR, expression_length, answer_length
from errors import UnsupportedCellTypeError


class CellType(Enum):
    SIMPLE_RNN = 'SimpleRNN'
    GRU = 'GRU'
    LSTM = 'LSTM'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedCellTypeError(value) from None

    def build(self, input_size, hidden_size, num_layers):
        return _CELL_CLASSES[self](
            input_size, hidden_size, num_layers=num_layers, batch_first=True
        )


_CELL_CLASSES = {
    CellType.SIMPLE_RNN: nn.RNN,
    CellType.GRU: nn.GRU,
    CellType.LSTM: nn.LSTM,
}


class AdditionRNN(nn.Module):
    def __init__(self, layers, hidden_size, cell_type, digits, vocab_size):
        super().__init__()
        self.cell_type = CellType.parse(cell_type)
        self.digits = digits
        self.vocab_size = vocab_size
        self.input_len = expression_length(digits)
        self.output_len = answer_length(digits)

        self.encoder = self.cell_type.build(vocab_size, hidden_size, layers)
        self.decoder = self.cell_type.build(hidden_size, hidden_size, layers)
        self.head = nn.Linear(hidden_size, vocab_size)

        self._init_weights()

    def _init_weights(self):
        # Glorot-normal recurrent kernels
        for name, p in self.named_parameters():
            if 'weight_hh' in name:
                nn.init.xavier_normal_(p)

    def forward(self, x):
        enc, _ = self.encoder(x)                             # (B, T_in, H)
        state = enc[:, -1]                                   # (B, H)
        rep = state.unsqueeze(1).repeat(1, self.output_len, 1)  # (B, T_out, H)
        dec, _ = self.decoder(rep)                           # (B, T_out, H)
        return self.head(dec)                                # (B, T_out, V)

    @torch.no_grad()
    def predict(self, x):
        self.eval()
        return F.softmax(self.forward(x), dim=-1)

    def count_parameters(self):
        trainable = sum(p.numel() for p in self.parameters() if p.requires_grad)
        total = sum(p.numel() for p in self.parameters())
        return trainable, total


def build_model(layers, hidden_size, rnn_type, digits, vocab_size):
    return AdditionRNN(layers, hidden_size, rnn_type, digits, vocab_size)


def build_optimizer(model, lr=LR):
    return torch.optim.Adam(model.parameters(), lr=lr)


def sequence_loss(logits, targets):
    """Categorical cross-entropy against one-hot targets, mean over positions."""
    return F.cross_entropy(
        logits.reshape(-1, logits.size(-1)),
        targets.argmax(dim=-1).reshape(-1),
    )


def sequence_accuracy(logits, targets):
    """Fraction of answer positions whose argmax matches the target label."""
    return (logits.argmax(dim=-1) == targets.argmax(dim=-1)).float().mean()
