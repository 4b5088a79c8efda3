"""
tokenforge

In-process EVM-style chain with a reflection token launchpad: reflection
tokens, governance and token timelocks, vaults, create2 factories and a
constant-product AMM.
"""

__version__ = "0.1.0"
