"""
Test suite for tokenforge.

Focus areas:
- Deterministic addresses and canonical encoding
- Chain atomicity, snapshots and the event log hash chain
- Reflection token accounting and bot protection
- Timelocks, vaults and the create2 factories
- End-to-end token launches through ReflectionTokenFactory
"""
