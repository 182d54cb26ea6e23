# -*- coding: utf-8 -*-
import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("splinekit")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from splinekit.control_points import ControlGrid, ControlVec  # noqa: E402
from splinekit.errors import (  # noqa: E402
    DegenerateWeightError,
    InvalidConfigurationError,
    OutOfRangeError,
    SplineError,
)
from splinekit.export import BoundingBox, Triangulation  # noqa: E402
from splinekit.knots import KnotVector  # noqa: E402
from splinekit.splines import NURBS, BSpline  # noqa: E402
from splinekit.step_iter import GridStepRange, StepRange  # noqa: E402
from splinekit.surfaces import BSurface, NURBSurface  # noqa: E402
from splinekit.types import ParamRange  # noqa: E402

__all__ = [
    '__version__',
    'BSpline',
    'BSurface',
    'BoundingBox',
    'ControlGrid',
    'ControlVec',
    'DegenerateWeightError',
    'GridStepRange',
    'InvalidConfigurationError',
    'KnotVector',
    'NURBS',
    'NURBSurface',
    'OutOfRangeError',
    'ParamRange',
    'SplineError',
    'StepRange',
    'Triangulation',
]
