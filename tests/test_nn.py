import logging
import unittest

import torch

from backprop.activations import Sigmoid
from backprop.datasets.xor import XorDataset
from backprop.exceptions import DimensionMismatchError, LayerStateError
from backprop.initializers import RandomInitializer
from backprop.layers import Layer
from backprop.layout import NetworkLayout
from backprop.logger import TrainingLogger
from backprop.nn import NN, TrainingExample


def xor_network():
    """ 2-2-1 sigmoid network starting from weights known to learn XOR
    """
    hidden = Layer([[0.5, 0.9], [0.4, 1.0]], [-0.8, 0.1], Sigmoid())
    output = Layer([[-1.2], [1.1]], [-0.3], Sigmoid())
    return NN([hidden, output])


class RecordingLayer(Layer):

    def __init__(self, visits, *args):
        super().__init__(*args)
        self.visits = visits

    def back_propagate(self, state, cost_derivative):
        self.visits.append(self)
        return super().back_propagate(state, cost_derivative)


class TestNetworkStructure(unittest.TestCase):

    def test_needs_a_layer(self):
        with self.assertRaises(ValueError):
            NN([])

    def test_chain_ends(self):
        nn = NetworkLayout(3, [(4, "Tanh"), (5, "ReLU"), (2, "Sigmoid")], RandomInitializer(seed=1)).build()
        self.assertFalse(nn.first_layer.has_previous)
        self.assertTrue(nn.first_layer.has_next)
        self.assertTrue(nn.last_layer.has_previous)
        self.assertFalse(nn.last_layer.has_next)
        self.assertEqual(3, nn.input_size)
        self.assertEqual(2, nn.output_size)
        self.assertEqual("<NN 3-4-5-2>", repr(nn))

    def test_back_propagate_visits_layers_in_reverse(self):
        visits = []
        layers = [
            RecordingLayer(visits, [[0.1, 0.2]], [0.0, 0.0], "Sigmoid"),
            RecordingLayer(visits, [[0.1], [0.2]], [0.0], "Tanh"),
            RecordingLayer(visits, [[0.3, -0.3]], [0.1, 0.2], "Softplus"),
        ]
        nn = NN(layers)
        context = nn.new_context()
        nn.feed_forward([0.5], context)
        nn.back_propagate(context, [1.0, -1.0])
        self.assertEqual(list(reversed(layers)), visits)
        self.assertIsNone(context.states[0].upstream_gradient)
        self.assertIsNotNone(context.states[1].upstream_gradient)


class TestQuery(unittest.TestCase):

    def test_golden_single_layer(self):
        nn = NN([Layer([[0.1, 0.2], [0.3, 0.4]], [0.1, 0.1], Sigmoid())])
        output = nn.query([1, 0])
        self.assertAlmostEqual(0.5498, output[0].item(), places=4)
        self.assertAlmostEqual(0.5744, output[1].item(), places=4)

    def test_query_is_deterministic(self):
        nn = NetworkLayout(4, [(3, "Tanh"), (2, "Sigmoid")], RandomInitializer(seed=7)).build()
        parameters = nn.get_parameters()
        outputs = [nn.query([0.1, -0.2, 0.3, 0.9]) for _ in range(5)]
        for output in outputs[1:]:
            self.assertTrue(torch.equal(outputs[0], output))
        for (w0, b0), (w1, b1) in zip(parameters, nn.get_parameters()):
            self.assertTrue(torch.equal(w0, w1))
            self.assertTrue(torch.equal(b0, b1))

    def test_query_wrong_width(self):
        with self.assertRaises(DimensionMismatchError):
            xor_network().query([1, 0, 1])


class TestTraining(unittest.TestCase):

    def test_cost(self):
        nn = xor_network()
        self.assertAlmostEqual(0.5 * (0.25 + 1.0), nn.cost([0.5, 1.0], [1.0, 0.0]))

    def test_train_example_returns_cost_before_update(self):
        nn = xor_network()
        example = TrainingExample([1, 0], [1])
        expected = nn.cost(nn.query(example.input), example.expected_output)
        self.assertAlmostEqual(expected, nn.train_example(example, 0.5, 0.9))
        self.assertLess(nn.cost(nn.query(example.input), example.expected_output), expected)

    def test_xor(self):
        nn = xor_network()
        cost = nn.train(XorDataset().examples(), 10_000, learning_rate=0.5, momentum=0.9)
        self.assertLess(cost, 0.01)
        for sample, real in XorDataset().train_iterator():
            self.assertLess(abs(nn.query(sample)[0].item() - real[0]), 0.5)

    def test_cost_decreases_over_epochs(self):
        nn = xor_network()
        epoch_costs = []

        def on_progress(progress):
            if progress.example == progress.examples:
                epoch_costs.append(progress.mean_cost)

        nn.train(XorDataset().examples(), 3000, on_progress=on_progress)
        self.assertEqual(3000, len(epoch_costs))
        chunks = [sum(epoch_costs[i:i + 500]) / 500 for i in range(0, 3000, 500)]
        self.assertLess(chunks[-1], chunks[0])
        self.assertLessEqual(chunks[-1], min(chunks[:-1]))

    def test_returns_mean_of_last_epoch(self):
        nn = xor_network()
        progresses = list(nn.training_steps(XorDataset().examples(), 2))
        self.assertEqual(8, len(progresses))
        last_epoch = [progress.cost for progress in progresses[4:]]
        self.assertAlmostEqual(sum(last_epoch) / 4, progresses[-1].mean_cost)
        self.assertEqual((1, 2, 4, 4), progresses[-1][:4])
        self.assertEqual((0, 2, 1, 4), progresses[0][:4])
        self.assertAlmostEqual(progresses[0].cost, progresses[0].mean_cost)

        other = xor_network()
        self.assertAlmostEqual(progresses[-1].mean_cost, other.train(XorDataset().examples(), 2))

    def test_progress_callback_is_called_per_example(self):
        calls = []
        xor_network().train(XorDataset().examples(), 3, on_progress=calls.append)
        self.assertEqual(12, len(calls))
        self.assertEqual([1, 2, 3, 4] * 3, [progress.example for progress in calls])
        self.assertEqual([0] * 4 + [1] * 4 + [2] * 4, [progress.epoch for progress in calls])

    def test_no_epochs(self):
        nn = xor_network()
        parameters = nn.get_parameters()
        self.assertEqual(0.0, nn.train(XorDataset().examples(), 0))
        self.assertTrue(torch.equal(parameters[0][0], nn.first_layer.weights))

    def test_accepts_pairs(self):
        nn = xor_network()
        cost = nn.train([([0, 1], [1]), ([1, 1], [0])], 1)
        self.assertGreater(cost, 0.0)

    def test_momentum_changes_the_result(self):
        without_momentum = xor_network()
        with_momentum = xor_network()
        without_momentum.train(XorDataset().examples(), 1, learning_rate=0.5, momentum=0.0)
        with_momentum.train(XorDataset().examples(), 1, learning_rate=0.5, momentum=0.9)
        self.assertFalse(torch.allclose(without_momentum.first_layer.weights, with_momentum.first_layer.weights))
        self.assertFalse(torch.allclose(without_momentum.last_layer.weights, with_momentum.last_layer.weights))

    def test_order_matters(self):
        examples = XorDataset().examples()
        forward = xor_network()
        backward = xor_network()
        forward.train(examples, 1)
        backward.train(list(reversed(examples)), 1)
        self.assertFalse(torch.allclose(forward.first_layer.weights, backward.first_layer.weights))

    def test_wrong_expected_width(self):
        with self.assertRaises(DimensionMismatchError):
            xor_network().train([([0, 1], [1, 0])], 1)

    def test_logger_progress(self):
        logger = TrainingLogger(stdout=False)
        with self.assertLogs(logger, level=logging.INFO) as logs:
            xor_network().train(XorDataset().examples(), 4, logger=logger, log_interval=2)
        self.assertEqual(2, len(logs.records))
        self.assertIn("(2 / 4)", logs.records[0].getMessage())
        self.assertIn("(4 / 4)", logs.records[1].getMessage())

    def test_log_interval_must_be_positive(self):
        logger = TrainingLogger(stdout=False)
        with self.assertRaises(ValueError):
            xor_network().train(XorDataset().examples(), 2, logger=logger, log_interval=0)


class TestContexts(unittest.TestCase):

    def test_update_before_backward(self):
        nn = xor_network()
        context = nn.new_context()
        nn.feed_forward([1, 1], context)
        with self.assertRaises(LayerStateError):
            nn.perform_gradient_descent(context, 0.5, 0.9)

    def test_backward_without_forward(self):
        nn = xor_network()
        with self.assertRaises(LayerStateError):
            nn.back_propagate(nn.new_context(), [1.0])

    def test_context_of_another_network(self):
        nn = xor_network()
        other = NN([Layer([[0.1]], [0.0], Sigmoid())])
        with self.assertRaises(LayerStateError):
            nn.feed_forward([1, 1], other.new_context())

    def test_query_does_not_disturb_a_pending_step(self):
        nn = xor_network()
        reference = xor_network()
        example = TrainingExample([1, 0], [1])

        context = nn.new_context()
        output = nn.feed_forward(example.input, context)
        nn.query([0, 0])
        nn.back_propagate(context, nn.loss.der(output, example.expected_output))
        nn.perform_gradient_descent(context, 0.5, 0.9)

        reference.train_example(example, 0.5, 0.9)
        for (w0, b0), (w1, b1) in zip(reference.get_parameters(), nn.get_parameters()):
            self.assertTrue(torch.equal(w0, w1))
            self.assertTrue(torch.equal(b0, b1))


class TestParameters(unittest.TestCase):

    def test_set_parameters(self):
        nn = xor_network()
        parameters = nn.get_parameters()
        nn.train(XorDataset().examples(), 5)
        nn.set_parameters(parameters)
        self.assertTrue(torch.equal(parameters[1][0], nn.last_layer.weights))

    def test_set_parameters_resets_momentum(self):
        nn = xor_network()
        parameters = nn.get_parameters()
        nn.train(XorDataset().examples(), 5)
        nn.set_parameters(parameters)
        for layer in nn.layers:
            self.assertEqual(0.0, layer.previous_delta_weights.abs().sum().item())
            self.assertEqual(0.0, layer.previous_delta_biases.abs().sum().item())

        fresh = xor_network()
        nn.train(XorDataset().examples(), 1)
        fresh.train(XorDataset().examples(), 1)
        self.assertTrue(torch.equal(fresh.first_layer.weights, nn.first_layer.weights))

    def test_set_parameters_wrong_shape(self):
        with self.assertRaises(DimensionMismatchError):
            xor_network().set_parameters([([[1.0]], [0.0]), ([[1.0]], [0.0])])
