"""
Aerostruct - composable aeroelastic models in mass-matrix form

Primitive aerodynamic, structural and control-surface models are joined by
coupling functions into a single model ``M(x, y, p, t) dx = f(x, y, p, t)``
whose structure (traits) is derived before anything is evaluated.
"""

from beartype.claw import beartype_package

beartype_package(__name__)

__version__ = "0.1.0"

from .composition import CoupledModel, ModelCombiner
from .coupling import Coupling, CouplingRegistry, IdentityCoupling
from .errors import ConstructionError, ShapeMismatch, UnsupportedCoupling
from .fields import input_var, param, state
from .linearize import analyze_modes, linearize, parameter_sweep
from .model import Model, NoStateModel
from .models import QuasiSteady, RigidBody, SimpleFlap, Steady, TypicalSection, Wagner
from .propagation import combine_traits
from .registry import couple_models, default_combiner, default_coupling_registry, default_trait_registry
from .traits import (
    CONSERVATIVE,
    STATELESS,
    CouplingTraits,
    InPlaceness,
    InputDependence,
    MatrixType,
    ModelTraits,
    TraitRegistry,
    matrix_join,
    precedes,
)

__all__ = [
    "__version__",
    # core
    "Model",
    "NoStateModel",
    "Coupling",
    "IdentityCoupling",
    "CoupledModel",
    "ModelCombiner",
    "state",
    "input_var",
    "param",
    # traits
    "InPlaceness",
    "MatrixType",
    "InputDependence",
    "ModelTraits",
    "CouplingTraits",
    "CONSERVATIVE",
    "STATELESS",
    "TraitRegistry",
    "CouplingRegistry",
    "matrix_join",
    "precedes",
    "combine_traits",
    # registries
    "default_trait_registry",
    "default_coupling_registry",
    "default_combiner",
    "couple_models",
    # errors
    "ConstructionError",
    "UnsupportedCoupling",
    "ShapeMismatch",
    # models
    "QuasiSteady",
    "Steady",
    "Wagner",
    "TypicalSection",
    "RigidBody",
    "SimpleFlap",
    # analysis
    "linearize",
    "analyze_modes",
    "parameter_sweep",
]
