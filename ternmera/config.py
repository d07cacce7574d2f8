"""
This file sets global configuration for ternmera
"""

import argparse

__version__ = "1.0.0"

# =================================  Parse arguments  ==================================
# parse command line options
parser = argparse.ArgumentParser(allow_abbrev=False)
parser.add_argument(
    "--ternmera-verbosity",
    help="default verbosity level for MERA optimization",
    type=int,
    default=0,
)

args, _ = parser.parse_known_args()
config = {"verbosity": args.ternmera_verbosity}


# ==============================  Display debug warning  ===============================
if not __debug__:
    print("\nInfo: assert statements are disabled")

ASSERT_TOL = 4e-13

# relative size of the imaginary part above which an expectation value is flagged
NONREAL_TOL = 1e-13

# MERA optimization parameters
default_parameters = {
    "miniter": 10,
    "maxiter": 2000,
    "rho_delta": 1e-6,
    "u_iters": 10,
    "w_iters": 10,
    "uw_iters": 10,
    "havg_depth": 10,
}
