"""Remote-side runtime: descriptor, arguments, event handlers, bootstrap and agent.

Submodules are imported explicitly; the bootstrap needs only the standard
library, so nothing is imported here.
"""
