"""
Training utilities for the baseline predictors.

Each model is trained on rows of (inputs..., target) with mini-batch Adam on
mean squared error.
"""
import logging
import torch
import torch.nn as nn
from torch.utils.data import DataLoader, TensorDataset
import numpy as np
from src.models.mlp_model import create_model
from src.utils.config import load_config, section

logger = logging.getLogger(__name__)


def prepare_dataset(cases):
    cases = np.asarray(cases, dtype=np.float32)
    X = cases[:, :-1]
    y = cases[:, -1:]
    return X, y


def train_loop(model, optimizer, loss_fn, loader, device, epochs=1):
    model.to(device)
    model.train()
    for e in range(epochs):
        for xb, yb in loader:
            xb = xb.to(device)
            yb = yb.to(device)
            pred = model(xb)
            loss = loss_fn(pred, yb)
            optimizer.zero_grad()
            loss.backward()
            optimizer.step()
    return model


def fit_model(model, cases, cfg=None):
    cfg = cfg if cfg is not None else section(load_config(), 'model')
    bs = cfg.get('batch_size', 50)
    epochs = cfg.get('epochs', 200)
    lr = cfg.get('learning_rate', 1e-2)
    X, y = prepare_dataset(cases)
    ds = TensorDataset(torch.from_numpy(X), torch.from_numpy(y))
    loader = DataLoader(ds, batch_size=bs, shuffle=True)
    device = torch.device(cfg.get('device', 'cpu'))
    optimizer = torch.optim.Adam(model.parameters(), lr=lr)
    loss_fn = nn.MSELoss()
    model = train_loop(model, optimizer, loss_fn, loader, device, epochs=epochs)
    model.to('cpu')
    return model


def train_baselines(training_sets, cfg=None):
    """One freshly initialised model per training set, in order"""
    cfg = cfg if cfg is not None else section(load_config(), 'model')
    models = []
    for i, cases in enumerate(training_sets):
        model = create_model(input_size=cases.shape[1] - 1, cfg=cfg)
        models.append(fit_model(model, cases, cfg=cfg))
        logger.debug(f"Trained baseline model {i} on {len(cases)} cases")
    return models
