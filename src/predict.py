"""
Inference wrappers exposing trained torch models through the oracle's
predictor interface.
"""
import torch
import numpy as np
from ensemble import Predictor


def predict_batch(model, X):
    x = torch.from_numpy(np.asarray(X, dtype=np.float32))
    model.eval()
    with torch.no_grad():
        out = model(x)
    return out.numpy().ravel().astype(float)


class TorchPredictor(Predictor):
    def __init__(self, model, ninputs):
        self.model = model
        self.ninputs = ninputs

    def predict(self, inputs):
        x = np.asarray(inputs, dtype=np.float32)[:self.ninputs]
        return float(predict_batch(self.model, x[None, :])[0])
