"""Neuron, layer and network model."""

from .layers import ClassificationCounter, HiddenLayer, InputLayer, Layer, LayerKind, OutputLayer
from .network import Network, ProgressCallback
from .neuron import BiasNeuron, InputNeuron, Neuron, NeuronKind

__all__ = [
    "BiasNeuron",
    "ClassificationCounter",
    "HiddenLayer",
    "InputLayer",
    "InputNeuron",
    "Layer",
    "LayerKind",
    "Network",
    "Neuron",
    "NeuronKind",
    "OutputLayer",
    "ProgressCallback",
]
