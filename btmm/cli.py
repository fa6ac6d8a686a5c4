"""command line entry point: fit ratings for a csv of results and write them next to it"""
import argparse
import logging
import os
import sys
from btmm.configs import DEFAULT_PARAMS, UPDATE_METHODS, RatingConfig
from btmm.metrics import evaluate
from btmm.models.bradley_terry_map import BradleyTerryMAP
from btmm.utils.data_utils import read_match_csv, write_ratings_csv
from btmm.utils.errors import RatingError

logger = logging.getLogger('btmm')


def setup_logging(verbose=False):
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if logger.handlers:
        return
    stream_handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)


def default_output_path(csv_path):
    directory, name = os.path.split(csv_path)
    return os.path.join(directory, f'results-{name}')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='btmm',
        description='Bradley-Terry MAP ratings from a csv of player_a,player_b,win|loss rows',
    )
    parser.add_argument('csv_path', help="header-less csv, result is 'win' if player_a beat player_b else 'loss'")
    parser.add_argument('mean', nargs='?', default=None, help=f'prior mean (default {DEFAULT_PARAMS["mean"]:g})')
    parser.add_argument('sd', nargs='?', default=None, help=f'prior standard deviation (default {DEFAULT_PARAMS["sd"]:g})')
    parser.add_argument('--output', default=None, help='where to write ratings (default results-<csv name>)')
    parser.add_argument('--max-sweeps', type=int, default=DEFAULT_PARAMS['max_sweeps'])
    parser.add_argument('--update-method', choices=UPDATE_METHODS, default=DEFAULT_PARAMS['update_method'])
    parser.add_argument('--evaluate', action='store_true', help='log accuracy and log loss on the input games')
    parser.add_argument('--top', type=int, default=None, help='print the top N competitors')
    parser.add_argument('--verbose', action='store_true')
    return parser


def run(args):
    config = RatingConfig.from_strings(
        mean=args.mean,
        sd=args.sd,
        max_sweeps=args.max_sweeps,
        update_method=args.update_method,
    )
    results = read_match_csv(args.csv_path)
    model = BradleyTerryMAP.from_results(results, verbose=args.verbose, **config.to_dict())
    output_path = args.output or default_output_path(args.csv_path)
    write_ratings_csv(model.get_ratings(), output_path)
    if args.evaluate and results:
        metrics = evaluate(model)
        for metric, val in metrics.items():
            logger.info(f'{metric:<12}: {val:.6f}')
    if args.top:
        model.print_leaderboard(args.top)
    logger.info('Optimization done, ratings written to %s.', output_path)
    return output_path


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        run(args)
    except (RatingError, OSError) as exc:
        logger.error('%s', exc)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
