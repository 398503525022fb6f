import argparse

from backprop import serialization
from backprop.datasets.xor import XorDataset
from backprop.initializers import RandomInitializer
from backprop.layout import NetworkLayout
from backprop.logger import TrainingLogger
from backprop.nn import DEFAULT_LEARNING_RATE, DEFAULT_MOMENTUM


def main():
    parser = argparse.ArgumentParser(description='Train a small network on the XOR table.')
    parser.add_argument('--epochs', type=int, default=10_000, metavar='N',
                        help='number of epochs to train (default: 10000)')
    parser.add_argument('--lr', type=float, default=DEFAULT_LEARNING_RATE, metavar='LR',
                        help=f'learning rate (default: {DEFAULT_LEARNING_RATE})')
    parser.add_argument('--momentum', type=float, default=DEFAULT_MOMENTUM, metavar='M',
                        help=f'momentum (default: {DEFAULT_MOMENTUM})')
    parser.add_argument('--hidden', type=int, nargs='+', default=[2],
                        help='neurons of the hidden layers (default: 2)')
    parser.add_argument('--activation', type=str, default='Sigmoid',
                        choices=['Sigmoid', 'Tanh', 'ReLU', 'Softplus'],
                        help='activation of the hidden layers (default: Sigmoid)')
    parser.add_argument('--seed', type=int, default=None, help='seed of the weight initializer')
    parser.add_argument('--save', type=str, default=None, help='write the trained network to this JSON file')
    parser.add_argument('--load', type=str, default=None, help='start from the network in this JSON file')
    parser.add_argument('--log-file', type=str, default=None, help='also log to this file')
    parser.add_argument('--quiet', action='store_true', help='no progress bar, no stdout logging')
    args = parser.parse_args()

    logger = TrainingLogger(filename=args.log_file, stdout=not args.quiet)

    # prepare nn
    if args.load is not None:
        logger.info(f"[xor.py] Loading nn from {args.load}.")
        nn = serialization.load(args.load)
    else:
        logger.info("[xor.py] Preparing nn.")
        layers = [(neurons, args.activation) for neurons in args.hidden] + [(1, 'Sigmoid')]
        nn = NetworkLayout(2, layers, RandomInitializer(seed=args.seed)).build()
    logger.info(f"[xor.py] Network: {nn}")

    # prepare dataset
    logger.info("[xor.py] Preparing dataset.")
    dataset = XorDataset()

    # train
    logger.info("[xor.py] Training.")
    cost = nn.train(dataset.examples(), args.epochs, args.lr, args.momentum, logger=logger,
                    verbose=not args.quiet)
    logger.info(f"[xor.py] Final mean cost -> {cost:.6f}")

    # test
    logger.info("[xor.py] Testing.")
    total_correct = 0
    for sample, real in dataset.train_iterator():
        prediction = nn.query(sample)
        correct = int(abs(prediction[0].item() - real[0]) < 0.5)
        total_correct += correct
        logger.info(f"\t[xor.py] sample: {sample}\tprediction: {prediction[0].item():.4f}\treal: {real[0]}")
    logger.info(f"\t[xor.py] Test results \t-> accuracy: {total_correct}/{len(dataset)}")

    if args.save is not None:
        serialization.save(nn, args.save)
        logger.info(f"[xor.py] Saved nn to {args.save}.")
    logger.close()


if __name__ == '__main__':
    main()
