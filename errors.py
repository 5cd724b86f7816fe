"""Exceptions raised by the addition RNN."""


class DuplicateSymbolError(ValueError):
    def __init__(self, symbol):
        super().__init__(f"Duplicate character '{symbol}'")
        self.symbol = symbol


class UnknownSymbolError(ValueError):
    def __init__(self, symbol, row, sample=None):
        where = f'row {row}' if sample is None else f'sample {sample}, row {row}'
        super().__init__(f"Unknown character: '{symbol}' ({where})")
        self.symbol = symbol
        self.row = row
        self.sample = sample


class UnsupportedCellTypeError(ValueError):
    def __init__(self, cell_type):
        super().__init__(f"Unsupported RNN type: '{cell_type}'")
        self.cell_type = cell_type


class ConfigurationRangeError(ValueError):
    pass
