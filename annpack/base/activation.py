__author__ = 'thomas'
import numpy as np

# exp(-x) is treated as 0 from here on
EXP_CUTOFF = 13.


def get_prediction_fn_for_string(prediction):
	if (prediction == 'log_softmax'):
		return (log_softmax, deriv_log_softmax)
	else:
		raise ValueError('Unknown prediction function: {}'.format(prediction))


def truncated_exp_neg(x):
	"""
	exp(-x) for x >= 0, with everything from EXP_CUTOFF onwards set to exactly 0.

	Each truncated entry drops at most exp(-13) ~= 2.3e-6 of mass, so a column of n rows loses at most
	(n - 1) * 2.3e-6 of its probability mass.
	"""
	x = np.asarray(x, dtype=np.float64)

	z = np.minimum(x, EXP_CUTOFF)

	return np.where(x < EXP_CUTOFF, np.exp(-z), 0.)


def log_softmax(x): # Columns are samples
	max_x = x.max(axis=0)[np.newaxis, :]

	shifted = truncated_exp_neg(max_x - x) # Numerical Stability!

	return x - (max_x + np.log(shifted.sum(axis=0))[np.newaxis, :])


def deriv_log_softmax(x, gy): # Fused with the NLL loss upstream, gy already carries the residual
	return np.exp(x) + gy
