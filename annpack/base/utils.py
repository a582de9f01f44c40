__author__ = 'thomas'
import numpy as np


def create_random_state(random_state):
	if (isinstance(random_state, np.random.RandomState)):
		return random_state
	elif (isinstance(random_state, (int, np.integer)) and random_state != 0):
		return np.random.RandomState(seed=random_state)
	else:
		return np.random.RandomState() # 0 or None: seed from the OS


def check_matrix(X, name, shape=None):
	X = np.asarray(X, dtype=np.float64)

	if (X.ndim != 2):
		raise ValueError('{} must be a 2d matrix, got {} dimension(s)'.format(name, X.ndim))
	if (shape is not None and X.shape != shape):
		raise ValueError('{} must have shape {}, got {}'.format(name, shape, X.shape))

	return X
