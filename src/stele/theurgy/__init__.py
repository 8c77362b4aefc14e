"""
Theurgy - Command implementations for stele.

Each module corresponds to a top-level CLI command:
- deploy:      Deploy a versioned contract module
- instantiate: Initialize a contract instance (``stele init``)
- update:      Update a contract instance, or view it without a transaction
- inspect:     List the contracts and methods a module schema declares
"""
