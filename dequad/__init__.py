__version__ = "0.1.0"


import logging
import sys

package_logger = logging.getLogger(__name__)
package_logger.setLevel(logging.WARNING)
handler = logging.StreamHandler(sys.stderr)
formatter = logging.Formatter("%(asctime)s - %(name)s - %(message)s")
handler.setFormatter(formatter)
package_logger.addHandler(handler)


from .precision import MPMathPrecision, NumpyPrecision, Precision, get_precision
from .num import QuadES, QuadSS, QuadTS, WeightTable
from .quadde import QuadDE, default_quadde, quadde

__all__ = [
    "MPMathPrecision",
    "NumpyPrecision",
    "Precision",
    "QuadDE",
    "QuadES",
    "QuadSS",
    "QuadTS",
    "WeightTable",
    "default_quadde",
    "get_precision",
    "quadde",
]
