"""Utility functions."""
import numpy as np


class Bunch(dict):
    """Dictionary with attribute access, used to return filtering results."""
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

    def __repr__(self):
        if not self.keys():
            return self.__class__.__name__ + "()"

        width = max(map(len, self.keys())) + 1
        lines = []
        for key, value in self.items():
            shape = getattr(value, 'shape', None)
            description = type(value).__name__ if shape is None else \
                '{} {}'.format(type(value).__name__, shape)
            lines.append('{}: {}'.format(key.rjust(width), description))
        return '\n'.join(lines)

    def __dir__(self):
        return list(self.keys())


def compute_rms(data):
    """Compute root-mean-square of data along 0 axis."""
    return np.mean(np.square(data), axis=0) ** 0.5
