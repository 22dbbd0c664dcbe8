"""Default registries for the models and couplings shipped with aerostruct.

Registries are plain immutable values. Projects with their own models build
on the defaults with ``extend`` and pass the result to a
:class:`~aerostruct.composition.ModelCombiner`:

    traits = default_trait_registry().extend({"my_beam": ModelTraits(...)})
    couplings = default_coupling_registry().extend({MyCoupling.kinds: MyCoupling})
    combiner = ModelCombiner(traits, couplings)
"""

from functools import lru_cache

from beartype.typing import Optional

from .composition import CoupledModel, ModelCombiner
from .coupling import CouplingRegistry
from .couplings import COUPLINGS
from .models.aerodynamics import quasisteady, wagner
from .models.control_surfaces import simple_flap
from .models.structures import rigid_body, typical_section
from .traits import TraitRegistry

__all__ = [
    "default_trait_registry",
    "default_coupling_registry",
    "default_combiner",
    "couple_models",
]

_MODEL_MODULES = (quasisteady, wagner, simple_flap, typical_section, rigid_body)


def default_trait_registry() -> TraitRegistry:
    """Traits of every model kind shipped with the package."""
    registry = TraitRegistry()
    for module in _MODEL_MODULES:
        registry = registry.extend(module.TRAITS)
    return registry


def default_coupling_registry() -> CouplingRegistry:
    """Every coupling shipped with the package."""
    return CouplingRegistry.from_couplings(COUPLINGS)


@lru_cache(maxsize=None)
def default_combiner() -> ModelCombiner:
    """Shared combiner over the default registries."""
    return ModelCombiner(default_trait_registry(), default_coupling_registry())


def couple_models(*models, combiner: Optional[ModelCombiner] = None) -> CoupledModel:
    """Couple ``models`` with ``combiner`` (the default combiner if omitted)."""
    if combiner is None:
        combiner = default_combiner()
    return combiner.couple(*models)
