"""
Contracts - counter contract deployment and invocation.

ABI encoding uses eth-abi; the artifact is bundled with the package.
"""
