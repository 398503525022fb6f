"""
0 0 -> 0
0 1 -> 1
1 0 -> 1
1 1 -> 0
"""
from backprop.nn import TrainingExample


XOR_TABLE = (
    ((0, 0), 0),
    ((0, 1), 1),
    ((1, 0), 1),
    ((1, 1), 0),
)


class XorDataset(object):

    def __init__(self, low=0.0, high=1.0):
        self.low = low  # target for a 0
        self.high = high  # target for a 1

    def __len__(self):
        return len(XOR_TABLE)

    def train_iterator(self):
        for sequence, label in XOR_TABLE:
            yield list(sequence), [self.high if label else self.low]

    def examples(self):
        return TrainingExample.from_pairs(self.train_iterator())
