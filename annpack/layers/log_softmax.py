__author__ = 'thomas'
import numpy as np

from annpack.base import activation


class LogSoftMax():
	"""
	Log-softmax over the columns of a 2d array (rows are features, columns are samples).

	The layer holds no state, so one instance can be shared between threads as long as every call gets its own
	buffers. Backward is the fused form expected by a negative log likelihood loss sitting on top of the layer.
	"""
	def __init__(self):
		self.activation_fn_, self.deriv_activation_fn_ = activation.get_prediction_fn_for_string('log_softmax')

	def forward(self, input, output=None):
		input = self._check_input(input)

		result = self.activation_fn_(input)

		return self._write(result, output)

	def backward(self, input, gy, g=None):
		input = self._check_input(input)
		gy = np.asarray(gy, dtype=np.float64)

		if (gy.shape != input.shape):
			raise ValueError('Shape of gradient {} does not match shape of input {}'.format(gy.shape, input.shape))

		result = self.deriv_activation_fn_(input, gy)

		return self._write(result, g)

	def serialize(self, archive=None, version=0):
		pass # Nothing to store

	def _check_input(self, input):
		input = np.asarray(input, dtype=np.float64)

		if (input.ndim != 2):
			raise ValueError('Expected a 2d array, got {} dimension(s)'.format(input.ndim))
		if (input.shape[0] < 1 or input.shape[1] < 1):
			raise ValueError('Expected at least 1 row and 1 column, got shape {}'.format(input.shape))

		return input

	def _write(self, result, out):
		if (out is None):
			return result

		if (not isinstance(out, np.ndarray)):
			raise TypeError('Output buffer must be a numpy array, got {}'.format(type(out).__name__))
		if (not np.issubdtype(out.dtype, np.floating)):
			raise TypeError('Output buffer must have a floating point dtype, got {}'.format(out.dtype))
		if (out.shape != result.shape):
			raise ValueError('Output buffer has shape {}, expected {}'.format(out.shape, result.shape))
		out[...] = result

		return out
