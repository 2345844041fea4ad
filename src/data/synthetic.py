"""
Synthetic regression data: two standard normal inputs and a noisy target
x0 - x1 + std * noise. Rows are laid out as (x0, x1, target).

Two deliberately damaged variants exist for extra baseline models: one whose
target is pure noise, one whose target is scaled up a thousandfold.
"""
import numpy as np

NINPUTS = 2
WORTHLESS_MODEL = 3
WILD_MODEL = 4
WILD_SCALE = 1000.0


def generate_cases(n, std, rng):
    x = rng.standard_normal((n, NINPUTS))
    target = x[:, 0] - x[:, 1] + std * rng.standard_normal(n)
    return np.column_stack([x, target])


def worthless_cases(cases, rng):
    out = cases.copy()
    out[:, -1] = rng.standard_normal(len(cases))
    return out


def wild_cases(cases):
    out = cases.copy()
    out[:, -1] = cases[:, -1] * WILD_SCALE
    return out


def training_sets_for(cases, nmodels, rng):
    """Training data per baseline model: the fourth learns noise, the fifth wild targets"""
    bad = worthless_cases(cases, rng) if nmodels > WORTHLESS_MODEL else None
    wild = wild_cases(cases) if nmodels > WILD_MODEL else None
    sets = []
    for i in range(nmodels):
        if i == WORTHLESS_MODEL:
            sets.append(bad)
        elif i == WILD_MODEL:
            sets.append(wild)
        else:
            sets.append(cases)
    return sets
