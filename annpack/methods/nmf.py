__author__ = 'thomas'
from argparse import ArgumentParser
import logging

from sklearn.decomposition import NMF
import numpy as np

from annpack.base import utils

logger = logging.getLogger(__name__)

# update rule -> (solver, beta_loss) of the factorisation engine
UPDATE_RULES = {
	'multdist': ('mu', 'frobenius'), # Multiplicative updates, Frobenius distance
	'multdiv': ('mu', 'kullback-leibler'), # Multiplicative updates, KL divergence
	'als': ('cd', 'frobenius') # (Hierarchical) alternating least squares via coordinate descent
}

DEFAULTS = {
	'update_rules': 'multdist',
	'max_iterations': 10000,
	'min_residue': 1e-5,
	'initial_w': None,
	'initial_h': None,
	'seed': 0
}

# max_iterations=0 means "no limit", the engine wants a positive bound though
NO_ITERATION_LIMIT = np.iinfo(np.int32).max

parser = ArgumentParser(description='Non-negative matrix factorisation V ~= WH.')
parser.add_argument('-i', '--input', type=str, required=True, help='input matrix V to factorise (csv)')
parser.add_argument('-r', '--rank', type=int, required=True, help='rank of the factorisation')
parser.add_argument('-u', '--update-rules', type=str, default=DEFAULTS['update_rules'],
					help='update rules, one of {}'.format(', '.join(sorted(UPDATE_RULES.keys()))))
parser.add_argument('-m', '--max-iterations', type=int, default=DEFAULTS['max_iterations'],
					help='number of iterations before giving up (0 is no limit)')
parser.add_argument('-e', '--min-residue', type=float, default=DEFAULTS['min_residue'],
					help='residue required to terminate the factorisation')
parser.add_argument('-q', '--initial-w', type=str, help='initial W matrix (csv)')
parser.add_argument('-p', '--initial-h', type=str, help='initial H matrix (csv)')
parser.add_argument('-W', '--w', type=str, help='file to save the calculated W matrix to (csv)')
parser.add_argument('-H', '--h', type=str, help='file to save the calculated H matrix to (csv)')
parser.add_argument('-s', '--seed', type=int, default=DEFAULTS['seed'], help='random seed (0 uses the OS)')
parser.add_argument('-v', '--verbose', action='store_true', help='log progress information')


def _is_integer(value):
	return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def validate(params):
	"""
	Check the parameters of a factorisation and fill in defaults.

	:param params: mapping with at least 'input' and 'rank'
	:return: a new dict holding every parameter of the binding
	"""
	p = dict(DEFAULTS)
	p.update({k: v for k, v in params.items() if v is not None})

	if ('input' not in p):
		raise ValueError('Parameter "input" is required')
	if ('rank' not in p):
		raise ValueError('Parameter "rank" is required')

	p['input'] = utils.check_matrix(p['input'], 'input')
	n, m = p['input'].shape

	if (p['update_rules'] not in UPDATE_RULES):
		raise ValueError('Invalid value "{}" for "update_rules", must be one of {}'.format(
			p['update_rules'], ', '.join(sorted(UPDATE_RULES.keys()))))
	for name in ('rank', 'max_iterations'):
		if (not _is_integer(p[name])):
			raise ValueError('Invalid value {} for "{}", must be an integer'.format(p[name], name))
	if (p['rank'] <= 0):
		raise ValueError('Invalid value {} for "rank", must be > 0'.format(p['rank']))
	if (p['max_iterations'] < 0):
		raise ValueError('Invalid value {} for "max_iterations", must be >= 0'.format(p['max_iterations']))
	if (float(p['min_residue']) < 0):
		raise ValueError('Invalid value {} for "min_residue", must be >= 0'.format(p['min_residue']))

	p['rank'] = int(p['rank'])
	p['max_iterations'] = int(p['max_iterations'])
	p['min_residue'] = float(p['min_residue'])

	if (p['initial_w'] is not None):
		p['initial_w'] = utils.check_matrix(p['initial_w'], 'initial_w', shape=(n, p['rank']))
	if (p['initial_h'] is not None):
		p['initial_h'] = utils.check_matrix(p['initial_h'], 'initial_h', shape=(p['rank'], m))

	return p


def nmf(V, rank, update_rules='multdist', max_iterations=10000, min_residue=1e-5, initial_w=None, initial_h=None,
		seed=0, verbose=False):
	random_state = utils.create_random_state(seed)
	n, m = V.shape

	# Copies, the engine updates W and H in place
	W = np.array(initial_w, dtype=np.float64) if initial_w is not None else random_state.uniform(size=(n, rank))
	H = np.array(initial_h, dtype=np.float64) if initial_h is not None else random_state.uniform(size=(rank, m))

	solver, beta_loss = UPDATE_RULES[update_rules]
	logger.info('Performing NMF with %s update rules (solver=%s; beta_loss=%s)...', update_rules, solver, beta_loss)

	model = NMF(n_components=rank, init='custom', solver=solver, beta_loss=beta_loss, tol=min_residue,
				max_iter=max_iterations if max_iterations > 0 else NO_ITERATION_LIMIT, verbose=int(verbose))
	W = model.fit_transform(V, W=W, H=H)

	logger.info('NMF converged to reconstruction error %s in %s iterations', model.reconstruction_err_, model.n_iter_)

	return W, model.components_


def run(params):
	p = validate(params)

	W, H = nmf(p['input'], p['rank'], update_rules=p['update_rules'], max_iterations=p['max_iterations'],
			   min_residue=p['min_residue'], initial_w=p['initial_w'], initial_h=p['initial_h'], seed=p['seed'],
			   verbose=p.get('verbose', False))

	return {'w': W, 'h': H}


def _load(path):
	return None if path is None else np.loadtxt(path, delimiter=',', ndmin=2)


def main(argv=None):
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
						format='%(asctime)s %(levelname)s %(name)s: %(message)s')

	if (args.w is None and args.h is None):
		logger.warning('Neither --w nor --h is specified, no output will be saved!')

	result = run({
		'input': _load(args.input),
		'rank': args.rank,
		'update_rules': args.update_rules,
		'max_iterations': args.max_iterations,
		'min_residue': args.min_residue,
		'initial_w': _load(args.initial_w),
		'initial_h': _load(args.initial_h),
		'seed': args.seed,
		'verbose': args.verbose
	})

	if (args.w is not None):
		np.savetxt(args.w, result['w'], delimiter=',')
	if (args.h is not None):
		np.savetxt(args.h, result['h'], delimiter=',')

	return result


if (__name__ == '__main__'):
	main()
