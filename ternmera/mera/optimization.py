import collections
import time

import numpy as np
import scipy.linalg as lg

from ternmera.config import config, default_parameters

from .environments import minimize_expectation_uw
from .mera_tools import check_hamiltonian, check_parameters

OptimizationState = collections.namedtuple(
    "OptimizationState",
    [
        "counter",
        "energy",
        "energy_change",
        "rhos",
        "rhos_maxchange",
        "last_status_print",
        "energies",
    ],
)


def initial_state():
    return OptimizationState(
        counter=0,
        energy=np.inf,
        energy_change=np.inf,
        rhos=None,
        rhos_maxchange=np.inf,
        last_status_print=-np.inf,
        energies=(),
    )


def keep_going(state, pars):
    """
    Whether another optimization step is needed. The first miniter steps are always
    done, then optimization stops when density matrices change by less than rho_delta
    or when maxiter is reached.
    """
    return state.counter <= pars["miniter"] or (
        abs(state.rhos_maxchange) > pars["rho_delta"]
        and state.counter < pars["maxiter"]
    )


def tail_hamiltonian(mera, h, havg_depth):
    """
    Effective Hamiltonian for the scale invariant tail: h and its copies ascended
    through the havg_depth next scales, each one weighted by 1/3 with respect to the
    previous one.
    """
    nt = mera.n_translayers
    havg = h
    hi = h
    for i in range(1, havg_depth + 1):
        hi = mera.ascend(hi, startscale=nt + i, endscale=nt + i + 1) / 3.0
        havg = havg + hi
    return havg


def optimization_step(
    mera, horig, state, pars, *, lowest_to_optimize=0, normalization=None, verbosity=0
):
    """
    Perform one optimization sweep over all layers of mera, starting from
    lowest_to_optimize. mera is modified in place.

    Parameters
    ----------
    mera : TernaryMERA
        Network to optimize.
    horig : ndarray
        Negative semidefinite Hamiltonian at scale lowest_to_optimize.
    state : OptimizationState
        State after the previous step.
    pars : dict
        Checked optimization parameters.
    lowest_to_optimize : int
        Lowest layer to optimize.
    normalization : callable
        Function applied to the raw energy. Default is identity.
    verbosity : int
        Level of log verbosity. Default is no log.

    Returns
    -------
    state : OptimizationState
        New optimization state.
    """
    counter = state.counter + 1
    old_rhos = state.rhos
    old_energy = state.energy
    nt = mera.n_translayers
    # disentanglers are only optimized from the last compulsory iteration on
    do_u = counter >= pars["miniter"]

    rhos = mera.build_rhos(lowest_to_optimize)
    h = horig
    for layer in range(lowest_to_optimize, nt):
        rho = rhos[layer - lowest_to_optimize + 1]
        u, w = mera.get_uw(layer)
        spaces = (mera.get_inputspace(layer), mera.get_outputspace(layer))
        u, w = minimize_expectation_uw(h, u, w, rho, pars, do_u=do_u, spaces=spaces)
        mera.set_uw(layer, u, w)
        h = mera.ascend(h, startscale=layer, endscale=layer + 1)
        if verbosity > 1:
            print(f"  layer {layer} optimized")

    havg = tail_hamiltonian(mera, h, pars["havg_depth"])
    u, w = mera.get_uw(np.inf)
    spaces = (mera.get_inputspace(np.inf), mera.get_outputspace(np.inf))
    u, w = minimize_expectation_uw(
        havg, u, w, rhos[-1], pars, do_u=do_u, spaces=spaces
    )
    mera.set_uw(np.inf, u, w)

    energy = mera.expect(h, opscale=nt, evalscale=nt)
    if normalization is not None:
        energy = normalization(energy)
    energy = np.float64(energy)
    energy_change = (energy - old_energy) / energy

    rhos_maxchange = state.rhos_maxchange
    if old_rhos is not None:
        rhos_maxchange = max(lg.norm(r - ro) for (r, ro) in zip(rhos, old_rhos))

    last_status_print = state.last_status_print
    # do not print status at every iteration once optimization gets further
    if verbosity > 0 and (counter - last_status_print) / counter > 0.02:
        print(
            f"Energy = {energy:.9e},  energy change = {energy_change:.3e},  "
            f"max rho change = {rhos_maxchange:.3e},  counter = {counter}."
        )
        last_status_print = counter

    return OptimizationState(
        counter=counter,
        energy=energy,
        energy_change=energy_change,
        rhos=rhos,
        rhos_maxchange=rhos_maxchange,
        last_status_print=last_status_print,
        energies=(*state.energies, energy),
    )


def iterate_minimization(
    mera, h, pars=None, *, lowest_to_optimize=0, normalization=None, verbosity=None
):
    """
    Generator yielding the optimization state after each step, until convergence.
    Arguments are the same as in minimize_expectation.
    """
    if verbosity is None:
        verbosity = config["verbosity"]
    pars = check_parameters({} if pars is None else pars, default_parameters)
    check_hamiltonian(h, mera.get_inputspace(0))
    if verbosity > 0:
        print(
            f"Optimizing a MERA with {mera.n_layers} layers, keeping the lowest "
            f"{lowest_to_optimize} fixed."
        )
    horig = mera.ascend(h, startscale=0, endscale=lowest_to_optimize)
    state = initial_state()
    t0 = time.time()
    while keep_going(state, pars):
        state = optimization_step(
            mera,
            horig,
            state,
            pars,
            lowest_to_optimize=lowest_to_optimize,
            normalization=normalization,
            verbosity=verbosity,
        )
        yield state
    if verbosity > 0:
        print(
            f"Optimization finished after {state.counter} iterations,",
            f"t = {time.time()-t0:.1f}, energy = {state.energy:.9e}",
        )


def minimize_expectation(
    mera, h, pars=None, *, lowest_to_optimize=0, normalization=None, verbosity=None
):
    """
    Optimize a MERA to minimize the expectation value of a two-site Hamiltonian.

    Updates maximize the magnitude of the energy, therefore h has to be negative
    semidefinite. A positive Hamiltonian can be shifted by its largest eigenvalue and
    normalization used to undo the shift, see ternmera.models.

    Parameters
    ----------
    mera : TernaryMERA
        Network to optimize, modified in place.
    h : (D, D, D, D) ndarray
        Two-site Hamiltonian on the physical lattice.
    pars : dict
        Optimization parameters: miniter, maxiter, rho_delta, u_iters, w_iters,
        uw_iters and havg_depth. Missing keys are set to default_parameters values.
    lowest_to_optimize : int
        Layers below lowest_to_optimize are kept fixed. Default is 0.
    normalization : callable
        Function applied to the raw energy before reporting it. Default is identity.
    verbosity : int
        Level of log verbosity. Default is set by command line option
        --ternmera-verbosity.

    Returns
    -------
    mera : TernaryMERA
        Optimized MERA.
    """
    for _ in iterate_minimization(
        mera,
        h,
        pars,
        lowest_to_optimize=lowest_to_optimize,
        normalization=normalization,
        verbosity=verbosity,
    ):
        pass
    return mera
