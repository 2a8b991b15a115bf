"""Mapping generator -- turn an OpenAPI document into WireMock stubs.

Sub-modules, leaves first:

* :mod:`~specmock.generator.synthesizer` -- schema-to-value synthesis.
* :mod:`~specmock.generator.interpolator` -- path placeholder substitution.
* :mod:`~specmock.generator.builder` -- the per-operation mapping walk.
"""

from specmock.generator.builder import build, build_mappings
from specmock.generator.interpolator import interpolate
from specmock.generator.synthesizer import MISSING, synthesize

__all__ = ["build", "build_mappings", "interpolate", "synthesize", "MISSING"]
