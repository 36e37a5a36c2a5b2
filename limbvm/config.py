"""Global configuration for LimbVM."""

import os

# ---------- Limb representation ----------
# Three limbs of 86 bits cover a 256-bit field element.
BASE = 2**86
N_LIMBS = 3
# Largest limb sum a witness may carry (every limb at BASE - 1).
MAX_SUM = 3 * (BASE - 1)

# ---------- Native field of the execution environment ----------
FELT_PRIME = 2**251 + 17 * 2**192 + 1

# ---------- Range-check builtin ----------
RC_BOUND = 2**128
# Signed carries in [-CARRY_SHIFT, CARRY_SHIFT) are shifted into [0, RC_BOUND).
CARRY_SHIFT = 2**127

# ---------- Target field ----------
SECP256K1_PRIME = 2**256 - 2**32 - 977

# ---------- Hint server (used by RemoteOracle) ----------
ORACLE_URL = os.environ.get("LIMBVM_ORACLE_URL", "http://127.0.0.1:9200")
ORACLE_TIMEOUT = float(os.environ.get("LIMBVM_ORACLE_TIMEOUT", "10.0"))
