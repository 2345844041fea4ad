"""
Small feed-forward regression network used as a baseline predictor.
"""
import torch
import torch.nn as nn


class MLFN(nn.Module):
    def __init__(self, input_size, hidden_size=2, output_size=1):
        super().__init__()
        self.hidden = nn.Linear(input_size, hidden_size)
        self.out = nn.Linear(hidden_size, output_size)

    def forward(self, x):
        return self.out(torch.tanh(self.hidden(x)))


def create_model(input_size, cfg=None):
    cfg = cfg or {}
    return MLFN(input_size, hidden_size=cfg.get('hidden_size', 2))
