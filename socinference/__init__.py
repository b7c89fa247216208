"""
socinference: measurement error and permutation inference for soil
organic carbon (SOC) assays.

Submodules:
    measurement: Multiplicative assay error models, measurement simulation,
        sequential duplicate selection and error-variance estimation
    permutation: Sign-flip and k-sample permutation tests, nonparametric
        combination of tests (NPC) and multiplicity correction
    field: Loading and reanalysis of a before/after field experiment
"""

__version__ = "0.1.0"

from socinference import measurement
from socinference import permutation
from socinference import field

__all__ = [
    "__version__",
    "measurement",
    "permutation",
    "field",
]
