"""
Core - network guard, cached reader, transaction submitter and lifecycle
tracker. Nothing here talks to the network directly; the wallet and the
contract client are injected.
"""
