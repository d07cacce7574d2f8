#!/usr/bin/env python

"""
Optimize a scale invariant ternary MERA for the critical transverse field Ising chain,
growing bond dimension along the way.
"""

import argparse

import numpy as np

from ternmera import TernaryMERA, TrivialSpace, minimize_expectation
from ternmera.models import ising_exact_energy, ising_hamiltonian, shift_negative

parser = argparse.ArgumentParser(description=__doc__)
parser.add_argument("--Dmax", help="final bond dimension", type=int, default=6)
parser.add_argument("--n_layers", help="number of layers", type=int, default=3)
parser.add_argument("--h_field", help="transverse field", type=float, default=1.0)
parser.add_argument("--maxiter", help="maximal iterations per D", type=int, default=200)
parser.add_argument("--savefile", help="save file for final MERA", type=str)
parser.add_argument("--verbosity", type=int, default=1)
args = parser.parse_args()

h_field = args.h_field
h, normalization = shift_negative(ising_hamiltonian(h_field))
exact = ising_exact_energy(h_field)
pars = {
    "miniter": 10,
    "maxiter": args.maxiter,
    "rho_delta": 1e-7,
    "u_iters": 5,
    "w_iters": 5,
    "uw_iters": 2,
    "havg_depth": 10,
}

print(f"Ising chain with transverse field h = {h_field}, exact energy = {exact:.9f}")
rng = np.random.default_rng(42)
mera = TernaryMERA.random(
    TrivialSpace(2), args.n_layers, random_u=True, rng=rng, verbosity=args.verbosity
)

D = 2
while True:
    minimize_expectation(
        mera, h, pars, normalization=normalization, verbosity=args.verbosity
    )
    energy = normalization(mera.expect(h))
    print(f"D = {D}: energy = {energy:.9f}, error = {energy - exact:.3e}")
    if D >= args.Dmax:
        break
    D += 2
    for layer in range(mera.n_translayers):
        mera.expand_bond_dimension(layer, D)

if args.savefile is not None:
    mera.save_to_file(args.savefile, h_field=h_field, energy=energy)
