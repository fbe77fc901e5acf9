"""
Commands - implementations of the top-level CLI commands.

- blocks:        Query a block by number
- transactions:  Transfer ETH and wait for confirmation
- contracts:     Deploy / call the counter contract
- env-template:  Write a .env template
- whoami:        Show the configured account address
"""
