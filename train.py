"""Train the addition RNN: regenerate data, fit one epoch, show examples, repeat.

Usage:
    python train.py                                  # defaults from config.py
    python train.py --digits 3 --rnn-type LSTM --hidden-size 256
    python train.py --digits 1 --training-size 20 --iterations 1 --batch-size 4
"""

import argparse
import sys
import time

import numpy as np
import torch
from torch.utils.data import DataLoader, TensorDataset

from charset import SymbolTable
from config import (
    CHARS, PAD_CHAR, DIGITS, TRAINING_SIZE, RNN_TYPE, RNN_LAYERS,
    HIDDEN_SIZE, BATCH_SIZE, ITERATIONS, NUM_TEST_EXAMPLES, LR, check_config
)
from data import AdditionDataset, split_data
from errors import ConfigurationRangeError, UnsupportedCellTypeError
from model import CellType, build_model, build_optimizer, sequence_loss, sequence_accuracy


class AdditionTrainer:
    """Owns one model for a whole run; each iteration draws a brand-new dataset.

    on_iteration_complete, if given, is called with every progress record:
        {'iteration', 'duration_seconds', 'train_loss', 'train_acc',
         'val_loss', 'val_acc', 'examples': [{'expression', 'predicted', 'correct'}]}
    """

    def __init__(self, digits, training_size, rnn_type, layers, hidden_size,
                 seed=None, device=None, on_iteration_complete=None, lr=LR):
        check_config(digits, training_size, rnn_type=rnn_type, layers=layers,
                     hidden_size=hidden_size)
        self.digits = digits
        self.training_size = training_size
        self.rnn_type = CellType.parse(rnn_type)
        self.layers = layers
        self.hidden_size = hidden_size
        self.device = torch.device(device) if device is not None else torch.device(
            'cuda' if torch.cuda.is_available() else 'cpu')
        self.on_iteration_complete = on_iteration_complete

        self.rng = np.random.default_rng(seed)
        if seed is not None:
            torch.manual_seed(seed)

        self.char_table = SymbolTable(CHARS)
        self.model = build_model(
            layers, hidden_size, self.rnn_type, digits, self.char_table.size
        ).to(self.device)
        self.optimizer = build_optimizer(self.model, lr=lr)

        self.train_data = self.test_data = None
        self.train_xs = self.train_ys = None
        self.test_xs = self.test_ys = None
        self.test_xs_for_display = None

        self.history = []
        self.loss_values = [[], []]        # [train, validation]
        self.accuracy_values = [[], []]

    def init_data(self):
        """Draw a fresh dataset and split it 90/10 by position."""
        ds = AdditionDataset(self.training_size, self.digits, self.char_table, seed=self.rng)
        self.train_data, self.test_data = split_data(ds.samples)
        self.train_xs, self.test_xs = split_data(ds.xs)
        self.train_ys, self.test_ys = split_data(ds.ys)

    def evaluate(self, xs, ys, batch_size):
        """Mean per-position loss and accuracy over (xs, ys)."""
        self.model.eval()
        total_loss = 0.0
        total_correct = 0.0
        total = 0
        loader = DataLoader(TensorDataset(xs, ys), batch_size=batch_size, shuffle=False)
        with torch.no_grad():
            for x, y in loader:
                x, y = x.to(self.device), y.to(self.device)
                logits = self.model(x)
                n = x.size(0)
                total_loss += sequence_loss(logits, y).item() * n
                total_correct += sequence_accuracy(logits, y).item() * n
                total += n
        return total_loss / max(total, 1), total_correct / max(total, 1)

    def fit_epoch(self, batch_size):
        """One shuffled pass over the train split, then score the validation split."""
        self.model.train()
        epoch_loss = 0.0
        epoch_correct = 0.0
        seen = 0
        loader = DataLoader(
            TensorDataset(self.train_xs, self.train_ys), batch_size=batch_size, shuffle=True
        )
        for x, y in loader:
            x, y = x.to(self.device), y.to(self.device)
            logits = self.model(x)
            loss = sequence_loss(logits, y)
            self.optimizer.zero_grad()
            loss.backward()
            self.optimizer.step()

            n = x.size(0)
            epoch_loss += loss.item() * n
            epoch_correct += sequence_accuracy(logits.detach(), y).item() * n
            seen += n

        train_loss = epoch_loss / max(seen, 1)
        train_acc = epoch_correct / max(seen, 1)
        val_loss, val_acc = self.evaluate(self.test_xs, self.test_ys, batch_size)
        return train_loss, train_acc, val_loss, val_acc

    def predict_examples(self, num_test_examples):
        """Predict the first num_test_examples validation rows and check them.

        Cycles through the validation split when it holds fewer rows.
        """
        # Release the previous iteration's display batch before taking a new one
        self.test_xs_for_display = None
        if num_test_examples == 0:
            return []

        rows = [k % len(self.test_data) for k in range(num_test_examples)]
        self.test_xs_for_display = self.test_xs[rows].to(self.device)

        probs = self.model.predict(self.test_xs_for_display)
        decoded = self.char_table.decode_batch(probs)
        del probs

        examples = []
        for k, row in enumerate(rows):
            expression, answer = self.test_data[row]
            examples.append({
                'expression': expression,
                'predicted': decoded[k],
                'correct': is_correct(answer, decoded[k]),
            })
        return examples

    def train(self, iterations, batch_size, num_test_examples):
        """Run `iterations` regenerate/fit/predict cycles; returns the records."""
        check_config(self.digits, self.training_size, rnn_type=self.rnn_type,
                     layers=self.layers, hidden_size=self.hidden_size,
                     batch_size=batch_size, iterations=iterations,
                     num_test_examples=num_test_examples)
        records = []
        for i in range(iterations):
            self.init_data()
            begin = time.perf_counter()
            train_loss, train_acc, val_loss, val_acc = self.fit_epoch(batch_size)
            duration = time.perf_counter() - begin

            self.loss_values[0].append({'x': i, 'y': train_loss})
            self.loss_values[1].append({'x': i, 'y': val_loss})
            self.accuracy_values[0].append({'x': i, 'y': train_acc})
            self.accuracy_values[1].append({'x': i, 'y': val_acc})

            record = {
                'iteration': i,
                'duration_seconds': duration,
                'train_loss': train_loss,
                'train_acc': train_acc,
                'val_loss': val_loss,
                'val_acc': val_acc,
                'examples': self.predict_examples(num_test_examples),
            }
            self.history.append(record)
            records.append(record)
            if self.on_iteration_complete is not None:
                self.on_iteration_complete(record)
        return records


def is_correct(answer, predicted):
    return answer.strip(PAD_CHAR) == predicted.strip(PAD_CHAR)


def format_record(record, iterations):
    lines = [
        f"Iteration {record['iteration'] + 1} of {iterations}: "
        f"Duration: {record['duration_seconds']:.3f} (s) | "
        f"train_loss={record['train_loss']:.4f} | "
        f"train_acc={record['train_acc']:.4f} | "
        f"val_loss={record['val_loss']:.4f} | "
        f"val_acc={record['val_acc']:.4f}"
    ]
    for ex in record['examples']:
        ok = 'OK' if ex['correct'] else 'FAIL'
        lines.append(f"  {ex['expression']} = {ex['predicted']} [{ok}]")
    return '\n'.join(lines)


def print_record(record, iterations):
    print(format_record(record, iterations))


def main(argv=None):
    parser = argparse.ArgumentParser(description='Train an RNN to add integers given as strings.')
    parser.add_argument('--digits', type=int, default=DIGITS)
    parser.add_argument('--training-size', type=int, default=TRAINING_SIZE)
    parser.add_argument('--rnn-type', type=str, default=RNN_TYPE,
                        help='SimpleRNN, GRU or LSTM')
    parser.add_argument('--layers', type=int, default=RNN_LAYERS)
    parser.add_argument('--hidden-size', type=int, default=HIDDEN_SIZE)
    parser.add_argument('--batch-size', type=int, default=BATCH_SIZE)
    parser.add_argument('--iterations', type=int, default=ITERATIONS)
    parser.add_argument('--num-test-examples', type=int, default=NUM_TEST_EXAMPLES)
    parser.add_argument('--seed', type=int, default=None)
    args = parser.parse_args(argv)

    try:
        check_config(args.digits, args.training_size, rnn_type=args.rnn_type, layers=args.layers,
                     hidden_size=args.hidden_size, batch_size=args.batch_size,
                     iterations=args.iterations, num_test_examples=args.num_test_examples)
        trainer = AdditionTrainer(
            args.digits, args.training_size, args.rnn_type, args.layers, args.hidden_size,
            seed=args.seed,
            on_iteration_complete=lambda r: print_record(r, args.iterations),
        )
    except (ConfigurationRangeError, UnsupportedCellTypeError) as e:
        print(e)
        return 1

    n_trainable, n_total = trainer.model.count_parameters()
    print(f"Model: {trainer.rnn_type.value}, layers={args.layers}, hidden={args.hidden_size}")
    print(f"Parameters: {n_trainable} trainable / {n_total} total")
    print(f"Device: {trainer.device}")

    trainer.train(args.iterations, args.batch_size, args.num_test_examples)
    return 0


if __name__ == '__main__':
    sys.exit(main())
