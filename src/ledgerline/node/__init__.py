"""
Node - JSON-RPC access to an Ethereum-compatible node.

Uses httpx (HTTP) and websockets (persistent socket) instead of web3.py.
"""
