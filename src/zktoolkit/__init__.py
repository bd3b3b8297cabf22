"""zktoolkit - Zero-knowledge-friendly proof data structures.

zktoolkit composes a pluggable field hash into commitments, Merkle
membership proofs, bounded-range proofs and nullifiers.

Key modules:

- :mod:`zktoolkit.field` - Canonical field element encoding and hex rendering
- :mod:`zktoolkit.oracle` - Field hash oracle interface and lazy initialisation
- :mod:`zktoolkit.commitment` - Salted hiding/binding commitments
- :mod:`zktoolkit.merkle` - Merkle trees and inclusion proofs
- :mod:`zktoolkit.range_proof` - Bit-decomposition range proofs
- :mod:`zktoolkit.nullifier` - Scoped nullifiers and double-spend tracking
- :mod:`zktoolkit.signatures` - Signature oracle and message signing
- :mod:`zktoolkit.toolkit` - Facade wiring one oracle into every component
"""

__version__ = "0.1.0"
