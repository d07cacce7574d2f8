import copy

import numpy as np
import scipy.linalg as lg

from ternmera.config import NONREAL_TOL
from ternmera.misc_tools import dominant_eigenvector, random_isometry
from ternmera.vector_space import VectorSpace, allowed_mask, get_vector_space_type

from .mera_tools import (
    InvalidScaleRange,
    StructuralInvariantViolation,
    check_leg_dimensions,
    interlayer_match,
    intralayer_match,
    isometry_sectors_fit,
    pad_with_zeros,
    u_leg_spaces,
    w_leg_spaces,
)
from .superoperators import ascend_twosite, descend_twosite


def random_layer(vin, vout, *, random_u=False, rng=None):
    """
    Construct disentangler and isometry for a layer with input space vin and output
    space vout. The disentangler is the identity unless random_u is True. Both tensors
    respect the symmetry of their legs.
    """
    if rng is None:
        rng = np.random.default_rng()
    d = vin.dim
    if random_u:
        # group u outputs together as isometry rows
        m = allowed_mask(u_leg_spaces(vin)).reshape(d * d, d * d)
        u = random_isometry(m, rng).reshape(d, d, d, d)
    else:
        u = np.eye(d * d, dtype=np.complex128).reshape(d, d, d, d)
    w = random_isometry(allowed_mask(w_leg_spaces(vin, vout)), rng)
    return u, w


class TernaryMERA:
    """
    Scale invariant ternary MERA for an infinite 1D chain.

    The network is a list of layers (u, w). Layer 0 is the lowest one, it maps the
    physical lattice (scale 0) to scale 1. The last layer is the scale invariant tail
    and is repeated at every scale beyond the explicit transition layers.

    Tensors are dense complex arrays, with legs ordered as (out1, out2, in1, in2) for
    a disentangler u and (out, in1, in2, in3) for an isometry w. The input vector space
    of every stored layer is kept alongside, output spaces are deduced from the next
    layer.
    """

    def __init__(self, uw_list, spaces, *, verbosity=0):
        """
        Parameters
        ----------
        uw_list : enumerable of tuple of ndarray
            Disentangler and isometry for each layer, the last one being the scale
            invariant tail.
        spaces : enumerable of VectorSpace
            Input space of each layer.
        verbosity : int
            Level of log verbosity. Default is no log.
        """
        self.verbosity = int(verbosity)
        self._uw_list = [
            (np.asarray(u, dtype=np.complex128), np.asarray(w, dtype=np.complex128))
            for (u, w) in uw_list
        ]
        self._spaces = list(spaces)
        if not self._uw_list:
            raise ValueError("A MERA needs at least one layer")
        if len(self._spaces) != len(self._uw_list):
            raise ValueError("Number of spaces does not match number of layers")
        if any(not isinstance(V, VectorSpace) for V in self._spaces):
            raise ValueError("spaces must be VectorSpace instances")
        st_type = type(self._spaces[0])
        if any(type(V) is not st_type for V in self._spaces):
            raise ValueError("All spaces must have the same symmetry")
        if any(V.is_dual for V in self._spaces):
            raise ValueError("Layer input spaces cannot be dual")

        self.check_invariant()
        if self.verbosity > 0:
            print(f"Construct {self}")

    @classmethod
    def random(cls, spaces, n_layers=None, *, random_u=False, rng=None, verbosity=0):
        """
        Construct a random MERA.

        Parameters
        ----------
        spaces : VectorSpace or enumerable of VectorSpace
            Input space of each layer, the last one being the tail. If a single space
            is given, it is used for all layers.
        n_layers : int
            Total number of layers, including the tail. Only read if a single space is
            given.
        random_u : bool
            Whether to use random unitary disentanglers. If False (default), they are
            set to identity.
        rng : numpy random generator
            Random number generator. If None, a new random generator is created with
            default_rng().
        verbosity : int
            Level of log verbosity. Default is no log.
        """
        if isinstance(spaces, VectorSpace):
            if n_layers is None:
                raise ValueError("n_layers must be given for a single space")
            if n_layers < 1:
                raise ValueError("A MERA needs at least one layer")
            spaces = [spaces] * int(n_layers)
        else:
            spaces = list(spaces)
        if rng is None:
            rng = np.random.default_rng()
        uw_list = []
        for i, vin in enumerate(spaces):
            vout = spaces[i + 1] if i + 1 < len(spaces) else vin
            uw_list.append(random_layer(vin, vout, random_u=random_u, rng=rng))
        return cls(uw_list, spaces, verbosity=verbosity)

    @classmethod
    def load_from_file(cls, savefile, *, verbosity=0):
        """
        Construct MERA from npz save file, as produced by save_to_file.

        Parameters
        ----------
        savefile : str
            Path to npz file.
        verbosity : int
            Level of log verbosity. Default is no log.
        """
        if verbosity > 0:
            print("Load MERA from file", savefile)
        with np.load(savefile) as fin:
            n_layers = int(fin["_MERA_n_layers"])
            st_type = get_vector_space_type(str(fin["_MERA_symmetry"]))
            uw_list = []
            spaces = []
            for i in range(n_layers):
                uw_list.append((fin[f"_MERA_u_{i}"], fin[f"_MERA_w_{i}"]))
                spaces.append(st_type(fin[f"_MERA_rep_{i}"]))
        return cls(uw_list, spaces, verbosity=verbosity)

    def get_data_dic(self):
        """
        Return MERA data as a dictionary of arrays, with keys prefixed by _MERA_.
        """
        data = {
            "_MERA_n_layers": self.n_layers,
            "_MERA_symmetry": self.symmetry(),
        }
        for i, ((u, w), V) in enumerate(zip(self._uw_list, self._spaces)):
            data[f"_MERA_u_{i}"] = u
            data[f"_MERA_w_{i}"] = w
            data[f"_MERA_rep_{i}"] = V.representation
        return data

    def save_to_file(self, savefile, **additional_data):
        """
        Save MERA data in external file.

        Parameters
        ----------
        savefile: str
            Path to file.
        additional_data: dict
            Data to store together with MERA data, passed as keyword arguments.
        """
        data = self.get_data_dic()
        np.savez_compressed(savefile, **data, **additional_data)
        if self.verbosity > 0:
            print("MERA saved in file", savefile)

    def copy(self):
        return type(self)(
            [(u.copy(), w.copy()) for (u, w) in self._uw_list],
            self._spaces,
            verbosity=self.verbosity,
        )

    def __repr__(self):
        return f"{self.symmetry()} symmetric ternary MERA with {self.n_layers} layers"

    def __str__(self):
        dims = [V.dim for V in self._spaces]
        return "\n".join((repr(self), f"bond dimensions = {dims}"))

    ####################################################################################
    # Layer access
    ####################################################################################
    @property
    def n_layers(self):
        return len(self._uw_list)

    @property
    def n_translayers(self):
        return len(self._uw_list) - 1

    def symmetry(self):
        return self._spaces[0].symmetry()

    def _layer_index(self, layer):
        if layer < 0:
            raise ValueError(f"Invalid layer {layer}")
        if layer >= self.n_translayers:
            return self.n_translayers
        return int(layer)

    def get_uw(self, layer):
        """
        Disentangler and isometry of layer. Any layer beyond the transition layers,
        including np.inf, is the scale invariant tail.
        """
        return self._uw_list[self._layer_index(layer)]

    def get_u(self, layer):
        return self.get_uw(layer)[0]

    def get_w(self, layer):
        return self.get_uw(layer)[1]

    def get_inputspace(self, layer):
        return self._spaces[self._layer_index(layer)]

    def get_outputspace(self, layer):
        return self.get_inputspace(layer + 1)

    def set_uw(self, layer, u, w, *, check_invariant=True):
        """
        Replace disentangler and isometry of layer. Any layer beyond the transition
        layers sets the tail.
        """
        i = self._layer_index(layer)
        self._uw_list[i] = (
            np.asarray(u, dtype=np.complex128),
            np.asarray(w, dtype=np.complex128),
        )
        if check_invariant:
            self.check_invariant()

    def set_u(self, layer, u, *, check_invariant=True):
        self.set_uw(layer, u, self.get_w(layer), check_invariant=check_invariant)

    def set_w(self, layer, w, *, check_invariant=True):
        self.set_uw(layer, self.get_u(layer), w, check_invariant=check_invariant)

    def check_invariant(self):
        """
        Check bond dimensions between tensors and leg spaces, within each layer and
        between consecutive layers, going one step into the scale invariant part.

        Raises StructuralInvariantViolation if any bond does not match.
        """
        u, w = self.get_uw(0)
        for i in range(1, self.n_translayers + 2):
            vin = self.get_inputspace(i - 1)
            vout = self.get_inputspace(i)
            unext, wnext = self.get_uw(i)
            if not (
                intralayer_match(u, w)
                and check_leg_dimensions(u, u_leg_spaces(vin))
                and check_leg_dimensions(w, w_leg_spaces(vin, vout))
            ):
                raise StructuralInvariantViolation(
                    f"Mismatching bonds in MERA within layer {i - 1}"
                )
            if not interlayer_match(w, unext):
                raise StructuralInvariantViolation(
                    f"Mismatching bonds in MERA between layers {i - 1} and {i}"
                )
            u, w = unext, wnext
        return True

    def check_isometries(self, tol=1e-12):
        """
        Check every disentangler is unitary and every isometry has orthonormal rows.
        """
        for u, w in self._uw_list:
            d2 = u.shape[0] * u.shape[1]
            um = u.reshape(d2, d2)
            if lg.norm(um @ um.T.conj() - np.eye(d2)) > tol:
                return False
            wm = w.reshape(w.shape[0], -1)
            if lg.norm(wm @ wm.T.conj() - np.eye(w.shape[0])) > tol:
                return False
        return True

    ####################################################################################
    # Network modification
    ####################################################################################
    def release_transition_layer(self):
        """
        Add a transition layer, as a copy of the scale invariant tail. The represented
        state is unchanged.
        """
        u, w = self._uw_list[-1]
        self._uw_list.append((u.copy(), w.copy()))
        self._spaces.append(copy.deepcopy(self._spaces[-1]))
        if self.verbosity > 0:
            print(f"Release transition layer, MERA has now {self.n_layers} layers")

    def randomize_layer(self, layer, *, random_u=False, rng=None):
        """
        Replace layer tensors by random ones, keeping input and output spaces.
        """
        vin = self.get_inputspace(layer)
        vout = self.get_outputspace(layer)
        u, w = random_layer(vin, vout, random_u=random_u, rng=rng)
        self.set_uw(layer, u, w)

    def expand_bond_dimension(self, layer, newdims):
        """
        Expand the output space of layer by padding tensors with zeros. Existing
        coefficients are not modified. This breaks isometry conditions, a round of
        optimization restores them.

        Parameters
        ----------
        layer : int
            Transition layer whose output space is expanded. Expanding the last
            transition layer expands the scale invariant tail.
        newdims : int or dict
            New dimension (trivial symmetry) or dictionary sector -> degeneracy for
            the sectors to expand.
        """
        if not 0 <= layer < self.n_translayers:
            raise ValueError(
                f"Cannot expand output space of layer {layer}, expandable layers are "
                f"0 to {self.n_translayers - 1}"
            )
        vout = self.get_outputspace(layer)
        vnew = vout.expand(newdims)
        d = vnew.dim
        vin = self.get_inputspace(layer)
        if not isometry_sectors_fit(vin, vnew):
            raise ValueError(
                f"Cannot expand output space of layer {layer} to {vnew}: a sector is "
                "larger than the matching input sector"
            )
        if layer + 1 >= self.n_translayers and not isometry_sectors_fit(vnew, vnew):
            raise ValueError(
                f"Cannot expand scale invariant tail to {vnew}: a sector is larger "
                "than the matching input sector"
            )
        if self.verbosity > 0:
            print(f"Expand output space of layer {layer} from {vout.dim} to {d}")

        w = pad_with_zeros(self.get_w(layer), 0, d)
        self.set_w(layer, w, check_invariant=False)

        u_next, w_next = self.get_uw(layer + 1)
        for ax in range(4):
            u_next = pad_with_zeros(u_next, ax, d)
        for ax in range(1, 4):
            w_next = pad_with_zeros(w_next, ax, d)
        if layer + 1 >= self.n_translayers:
            # w_next is the scale invariant tail
            w_next = pad_with_zeros(w_next, 0, d)
        self.set_uw(layer + 1, u_next, w_next, check_invariant=False)
        self._spaces[self._layer_index(layer + 1)] = vnew
        self.check_invariant()

    ####################################################################################
    # Scale recursion
    ####################################################################################
    def ascend(self, op, *, startscale=0, endscale=None):
        """
        Ascend a two-site operator from startscale to endscale, using the average of
        the three ascending superoperators. endscale defaults to the scale invariant
        tail.
        """
        if endscale is None:
            endscale = self.n_translayers
        if endscale < startscale:
            raise InvalidScaleRange(
                f"endscale = {endscale} < startscale = {startscale}"
            )
        for scale in range(startscale, endscale):
            u, w = self.get_uw(scale)
            op = ascend_twosite(op, u, w, pos="avg")
        return op

    def descend(self, rho, *, startscale=None, endscale=0):
        """
        Descend a two-site density matrix from startscale to endscale. startscale
        defaults to the scale invariant tail.
        """
        if startscale is None:
            startscale = self.n_translayers
        if endscale > startscale:
            raise InvalidScaleRange(
                f"endscale = {endscale} > startscale = {startscale}"
            )
        for scale in range(startscale - 1, endscale - 1, -1):
            u, w = self.get_uw(scale)
            rho = descend_twosite(rho, u, w, pos="avg")
        return rho

    def build_fixedpoint_rho(self, *, dmax_full=100):
        """
        Scale invariant two-site density matrix, fixed point of the tail descending
        superoperator, normalized to unit trace.
        """
        nt = self.n_translayers
        d = self.get_inputspace(nt).dim

        def f(x):
            return self.descend(x, startscale=nt + 1, endscale=nt)

        eye = np.eye(d, dtype=np.complex128)
        x0 = np.einsum("ac,bd->abcd", eye, eye)
        _, rho = dominant_eigenvector(f, x0, dmax_full=dmax_full)
        # rho is Hermitian only up to a phase, dividing by its trace removes it
        rho = rho / np.einsum("abab->", rho)
        return rho

    def build_rho(self, layer):
        """
        Two-site density matrix at scale layer.
        """
        rho = self.build_fixedpoint_rho()
        if layer < self.n_translayers:
            rho = self.descend(rho, startscale=self.n_translayers, endscale=layer)
        return rho

    def build_rhos(self, lowest_to_generate=0):
        """
        Density matrices from scale lowest_to_generate to the scale invariant tail, in
        increasing scale order.
        """
        rho = self.build_fixedpoint_rho()
        rhos = [rho]
        for scale in range(self.n_translayers - 1, lowest_to_generate - 1, -1):
            rho = self.descend(rho, startscale=scale + 1, endscale=scale)
            rhos.append(rho)
        return rhos[::-1]

    def expect(self, op, *, opscale=0, evalscale=None):
        """
        Expectation value of two-site operator op defined at scale opscale. The
        operator is ascended to evalscale, where it is contracted with the density
        matrix. evalscale defaults to the scale invariant tail.

        A non-real value is reported with a warning, its real part is returned.
        """
        if evalscale is None:
            evalscale = self.n_translayers
        rho = self.build_rho(evalscale)
        op = self.ascend(op, startscale=opscale, endscale=evalscale)
        value = np.einsum("abcd,cdab->", rho, op)
        if abs(value.imag) > NONREAL_TOL * abs(value):
            print(f"Warning: non-real expectation value: {value}")
        return float(value.real)
