"""Composition of component models into a single coupled model.

The combiner looks up the coupling registered for an ordered tuple of
models, validates every declared arity, derives the composite traits and
returns a :class:`CoupledModel`. All checks happen here, before any state
vector exists.

The coupled model satisfies the same contract as a primitive model. For
components ``i`` with states ``x_i``, inputs ``y_i = g(dx, x, y, p, t)_i``
and a coupling affine in the state rate ``dx``

    g(dx, x, y, p, t) = g(0, x, y, p, t) + G_r · dx

the composite mass-matrix form is

    [blockdiag(M_i) - B · G_r] · dx = f(x, g(0, x, y, p, t), p, t)

where ``B`` stacks the component input jacobians. The state vector, the rate
vector and the rows of every matrix follow component order.

Example:
    >>> from aerostruct import Steady, TypicalSection, couple_models
    >>> model = couple_models(Steady(), TypicalSection())
    >>> model.state_count, model.parameter_count
    (4, 11)
"""

import warnings

from beartype.typing import Sequence
import numpy as np

from .coupling import Coupling, CouplingRegistry
from .errors import ConstructionError, ShapeMismatch
from .model import Model
from .propagation import combine_traits
from .traits import ModelTraits, TraitRegistry

__all__ = [
    "CoupledModel",
    "ModelCombiner",
]


def _slices(counts) -> tuple:
    offsets = np.concatenate(([0], np.cumsum(counts, dtype=int)))
    return tuple(slice(int(a), int(b)) for a, b in zip(offsets[:-1], offsets[1:]))


class CoupledModel(Model):
    """Model assembled from component models and a coupling function.

    Holds read-only references to its components and coupling; owns no
    mutable state. Construct through :class:`ModelCombiner`.
    """

    def __init__(
        self,
        components: Sequence[Model],
        coupling: Coupling,
        traits: ModelTraits,
        component_traits: Sequence[ModelTraits],
    ):
        self.components = tuple(components)
        self.coupling = coupling
        self.kind = tuple(m.kind for m in self.components)
        self._traits = traits
        self._component_traits = tuple(component_traits)

        self.state_vars = tuple(v for m in self.components for v in m.state_vars)
        self.input_vars = tuple(coupling.external_input_vars)
        self.parameter_vars = tuple(v for m in self.components for v in m.parameter_vars) + tuple(
            coupling.extra_parameter_vars
        )

        self._state_slices = _slices([m.state_count for m in self.components])
        self._input_slices = _slices([m.input_count for m in self.components])
        self._parameter_slices = _slices(
            [m.parameter_count for m in self.components] + [coupling.extra_parameter_count]
        )
        self._coupled_input_count = sum(m.input_count for m in self.components)
        self._rate_receivers = coupling.rate_receivers

    def __repr__(self):
        return f"CoupledModel({', '.join(repr(m) for m in self.components)})"

    @property
    def derived_traits(self) -> ModelTraits:
        return self._traits

    @property
    def traits(self) -> ModelTraits:
        """Traits derived once at construction."""
        return self._traits

    @property
    def component_traits(self) -> tuple:
        return self._component_traits

    # --- vector views ---

    def split_states(self, x) -> tuple:
        """Per-component views of a composite state (or rate) vector."""
        x = np.asarray(x)
        return tuple(x[s] for s in self._state_slices)

    def split_inputs(self, yc) -> tuple:
        """Per-component views of a concatenated component-input vector."""
        yc = np.asarray(yc)
        return tuple(yc[s] for s in self._input_slices)

    def split_parameters(self, p) -> tuple:
        """Per-component parameter views followed by the extra coupling parameters."""
        p = np.asarray(p)
        return tuple(p[s] for s in self._parameter_slices)

    def separate_states(self, x) -> tuple:
        """Per-component dictionaries of named state values."""
        return tuple(m.separate_states(xi) for m, xi in zip(self.components, self.split_states(x)))

    def separate_parameters(self, p) -> tuple:
        """Per-component named parameters followed by the named extra parameters."""
        views = self.split_parameters(p)
        named = [m.separate_parameters(pi) for m, pi in zip(self.components, views)]
        extra_names = [v.name for v in self.coupling.extra_parameter_vars]
        named.append(dict(zip(extra_names, views[-1])))
        return tuple(named)

    def pack_states(self, *states) -> np.ndarray:
        """Concatenate component state vectors in component order."""
        if len(states) != len(self.components):
            raise ValueError(f"Expected {len(self.components)} state vectors, got {len(states)}")
        return np.concatenate([np.asarray(s, dtype=float).reshape(-1) for s in states])

    def pack_parameters(self, *parameters, **extra) -> np.ndarray:
        """Concatenate component parameter vectors and the named extra parameters.

        Extra parameters not given take their declared defaults.
        """
        if len(parameters) != len(self.components):
            raise ValueError(
                f"Expected {len(self.components)} parameter vectors, got {len(parameters)}"
            )
        extra_names = {v.name for v in self.coupling.extra_parameter_vars}
        unknown = set(extra) - extra_names
        if unknown:
            raise ValueError(f"Unknown coupling parameter(s) {sorted(unknown)}")
        tail = [float(extra.get(v.name, v.default)) for v in self.coupling.extra_parameter_vars]
        return np.concatenate(
            [np.asarray(q, dtype=float).reshape(-1) for q in parameters] + [np.array(tail)]
        )

    def default_parameters(self, **overrides) -> np.ndarray:
        """Composite parameters from every component's defaults.

        Overrides address extra coupling parameters by name; component
        parameters are addressed as ``<index>_<name>`` when names collide.
        """
        p = np.array([v.default for v in self.parameter_vars], dtype=float)
        flat_names = [v.name for v in self.parameter_vars]
        for key, value in overrides.items():
            index = self._parameter_index(key, flat_names)
            p[index] = float(value)
        return p

    def _parameter_index(self, key: str, flat_names: list) -> int:
        matches = [i for i, name in enumerate(flat_names) if name == key]
        if len(matches) == 1:
            return matches[0]
        head, _, name = key.partition("_")
        if head.isdigit() and int(head) < len(self.components):
            component = int(head)
            local = self.components[component].parameter_names
            if name in local:
                return self._parameter_slices[component].start + local.index(name)
        if matches:
            raise ValueError(f"Parameter name '{key}' is ambiguous; use '<index>_{key}'")
        raise ValueError(f"Unknown parameter '{key}'")

    # --- coupling ---

    def coupling_inputs(self, dx, x, y, p, t) -> np.ndarray:
        """Concatenated component inputs computed by the coupling."""
        if self.coupling.traits.is_inplace:
            out = np.zeros(self._coupled_input_count)
            self.coupling.inputs_into(out, dx, x, y, p, t)
            return out
        return np.asarray(self.coupling.inputs(dx, x, y, p, t), dtype=float).reshape(-1)

    def _static_inputs(self, x, y, p, t) -> np.ndarray:
        # inputs with the rate-dependent part removed
        x = np.asarray(x, dtype=float)
        return self.coupling_inputs(np.zeros(x.size), x, y, p, t)

    def _blocks(self):
        return zip(
            self.components,
            self._component_traits,
            self._state_slices,
            self._input_slices,
            self._parameter_slices,
        )

    # --- model contract ---

    def rate_into(self, out, x, y, p, t) -> None:
        yc = self._static_inputs(x, y, p, t)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        for model, traits, xs, ys, ps in self._blocks():
            if model.state_count == 0:
                continue
            if traits.is_inplace:
                model.rate_into(out[xs], x[xs], yc[ys], p[ps], t)
            else:
                out[xs] = model.rate(x[xs], yc[ys], p[ps], t)

    def rate(self, x, y, p, t) -> np.ndarray:
        out = np.zeros(self.state_count)
        self.rate_into(out, x, y, p, t)
        return out

    def mass_matrix(self, x, y, p, t) -> np.ndarray:
        n = self.state_count
        out = np.zeros((n, n))
        yc = self._static_inputs(x, y, p, t)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        for model, traits, xs, ys, ps in self._blocks():
            if model.state_count == 0:
                continue
            if traits.is_inplace:
                model.mass_matrix_into(out[xs, xs], x[xs], yc[ys], p[ps], t)
            else:
                out[xs, xs] = model.mass_matrix(x[xs], yc[ys], p[ps], t)
        if self._rate_receivers:
            g_r = np.asarray(self.coupling.rate_jacobian(x, y, p, t), dtype=float)
            for i in self._rate_receivers:
                model = self.components[i]
                xs, ys, ps = self._state_slices[i], self._input_slices[i], self._parameter_slices[i]
                b = model.input_jacobian(x[xs], yc[ys], p[ps], t)
                out[xs, :] -= b @ g_r[ys, :]
        return out

    def state_jacobian(self, x, y, p, t) -> np.ndarray:
        n = self.state_count
        jac = np.zeros((n, n))
        yc = self._static_inputs(x, y, p, t)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        g_x = None
        for model, _, xs, ys, ps in self._blocks():
            if model.state_count == 0:
                continue
            jac[xs, xs] = model.state_jacobian(x[xs], yc[ys], p[ps], t)
            if model.input_count == 0:
                continue
            if g_x is None:
                g_x = np.asarray(self.coupling.state_jacobian(x, y, p, t), dtype=float)
            b = model.input_jacobian(x[xs], yc[ys], p[ps], t)
            jac[xs, :] += b @ g_x[ys, :]
        return jac

    def input_jacobian(self, x, y, p, t) -> np.ndarray:
        n = self.state_count
        jac = np.zeros((n, self.input_count))
        if self.input_count == 0:
            return jac
        yc = self._static_inputs(x, y, p, t)
        g_y = np.asarray(self.coupling.input_jacobian(x, y, p, t), dtype=float)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        for model, _, xs, ys, ps in self._blocks():
            if model.state_count == 0 or model.input_count == 0:
                continue
            b = model.input_jacobian(x[xs], yc[ys], p[ps], t)
            jac[xs, :] = b @ g_y[ys, :]
        return jac

    def parameter_jacobian(self, x, y, p, t) -> np.ndarray:
        """Jacobian ``blockdiag(df_i/dp_i) + B_i·G_p`` of the composite rate.

        Parameters entering through the rate-dependent coupling terms act on
        the mass matrix and are not included.
        """
        n = self.state_count
        jac = np.zeros((n, self.parameter_count))
        yc = self._static_inputs(x, y, p, t)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        g_p = None
        for model, _, xs, ys, ps in self._blocks():
            if model.state_count == 0:
                continue
            jac[xs, ps] = model.parameter_jacobian(x[xs], yc[ys], p[ps], t)
            if model.input_count == 0:
                continue
            if g_p is None:
                g_p = np.asarray(self.coupling.parameter_jacobian(x, y, p, t), dtype=float)
            b = model.input_jacobian(x[xs], yc[ys], p[ps], t)
            jac[xs, :] += b @ g_p[ys, :]
        return jac

    def residual(self, dx, x, y, p, t) -> np.ndarray:
        """Fully implicit residual ``M_i·dx_i - f_i(x_i, g(dx, x, y, p, t)_i)``.

        Zero exactly when ``dx`` solves the coupled system, whatever the
        input dependence of the components.
        """
        dx = np.asarray(dx, dtype=float)
        yc = self.coupling_inputs(dx, np.asarray(x, dtype=float), y, p, t)
        x, p = np.asarray(x, dtype=float), np.asarray(p, dtype=float)
        res = np.zeros(self.state_count)
        for model, _, xs, ys, ps in self._blocks():
            if model.state_count == 0:
                continue
            xi, yi, pi = x[xs], yc[ys], p[ps]
            res[xs] = model.mass_matrix(xi, yi, pi, t) @ dx[xs] - model.rate(xi, yi, pi, t)
        return res


class ModelCombiner:
    """Builds coupled models from explicit trait and coupling registries."""

    def __init__(self, traits: TraitRegistry, couplings: CouplingRegistry):
        self.traits = traits
        self.couplings = couplings

    def __repr__(self):
        return f"ModelCombiner({self.traits!r}, {self.couplings!r})"

    def couple(self, *models: Model) -> CoupledModel:
        """Couple ``models`` (in order) into a single model.

        Raises:
            UnsupportedCoupling: no coupling registered for the model kinds
            ShapeMismatch: a declared coupling arity disagrees with a model
        """
        if not models:
            raise ConstructionError("At least one model is required")
        coupling = self.couplings.lookup(models)
        _check_shapes(coupling, models)

        component_traits = [self.traits.traits_of(m) for m in models]
        receivers = coupling.rate_receivers
        traits = combine_traits(component_traits, coupling.traits, receivers)

        for i in receivers:
            if not component_traits[i].input_dependence.is_linear:
                warnings.warn(
                    f"{type(models[i]).__name__} is nonlinear in rate-dependent inputs; "
                    "the mass matrix is a linearization, use residual() for the exact system",
                    RuntimeWarning,
                    stacklevel=2,
                )

        return CoupledModel(models, coupling, traits, component_traits)


def _check_shapes(coupling: Coupling, models) -> None:
    declared = (
        ("states", coupling.state_counts, [m.state_count for m in models]),
        ("inputs", coupling.input_counts, [m.input_count for m in models]),
        ("parameters", coupling.parameter_counts, [m.parameter_count for m in models]),
    )
    for what, expected, actual in declared:
        if expected is None:
            continue
        if len(expected) != len(actual):
            raise ShapeMismatch(f"{what} entries", len(actual), len(expected), len(actual))
        for index, (e, a) in enumerate(zip(expected, actual)):
            if e is not None and e != a:
                raise ShapeMismatch(what, index, e, a)
    for i in coupling.rate_receivers:
        if not 0 <= i < len(models):
            raise ShapeMismatch("rate-dependent component index", i, len(models) - 1, i)
